import datetime
import pytest
from freezegun import freeze_time

from masjid_site.utils.time_utils import (
    TimeSource,
    format_countdown,
    format_time_12h,
    get_venue_timezone,
    millis_between,
    parse_time_internal,
)

SAST = get_venue_timezone('Africa/Johannesburg')


@pytest.mark.parametrize('raw, expected', [
    ('05:10', datetime.time(5, 10)),
    ('5:07', datetime.time(5, 7)),
    ('18:45 (SAST)', datetime.time(18, 45)),
    ('23:59', datetime.time(23, 59)),
])
def test_parse_time_internal_valid(raw, expected):
    assert parse_time_internal(raw) == expected


@pytest.mark.parametrize('raw', [None, '', 'noon', '24:00', '12:60', ':30', 5])
def test_parse_time_internal_invalid(raw):
    assert parse_time_internal(raw) is None


def test_format_time_12h():
    assert format_time_12h('18:30') == '6:30 PM'
    assert format_time_12h('00:05') == '12:05 AM'
    assert format_time_12h('12:00') == '12:00 PM'
    assert format_time_12h('after Isha') == 'after Isha'
    assert format_time_12h('') == ''


def test_format_countdown_floors_and_pads():
    assert format_countdown(0) == '00:00:00'
    assert format_countdown(999) == '00:00:00'
    assert format_countdown(1000) == '00:00:01'
    assert format_countdown(3_725_999) == '01:02:05'


def test_format_countdown_negative_is_zero():
    assert format_countdown(-1) == '00:00:00'
    assert format_countdown(-86_400_000) == '00:00:00'


def test_format_countdown_does_not_wrap_hours():
    assert format_countdown(30 * 3600 * 1000) == '30:00:00'
    assert format_countdown(100 * 3600 * 1000 + 1000) == '100:00:01'


def test_millis_between():
    start = datetime.datetime(2025, 1, 1, 12, 0, tzinfo=SAST)
    assert millis_between(start, start + datetime.timedelta(seconds=90)) == 90_000
    assert millis_between(start, start - datetime.timedelta(seconds=1)) == -1000


def test_time_source_ticks_once_per_second_and_strictly_increase():
    start = datetime.datetime(2025, 1, 1, 12, 0, tzinfo=SAST)
    readings = iter([start, start + datetime.timedelta(seconds=1), start, start + datetime.timedelta(seconds=3)])
    sleeps = []
    source = TimeSource(SAST, clock=lambda tz: next(readings), sleep=sleeps.append)

    ticks = list(source.ticks(limit=4))

    assert sleeps == [1, 1, 1]
    assert ticks[0] == start
    # The clock stepped back on the third reading; the tick still moves forward.
    assert ticks[2] == start + datetime.timedelta(seconds=2)
    assert all(a < b for a, b in zip(ticks, ticks[1:]))


@freeze_time("2025-03-10 11:00:00")
def test_time_source_now_uses_venue_timezone():
    now = TimeSource(SAST).now()
    assert now.utcoffset() == datetime.timedelta(hours=2)
    assert (now.hour, now.minute) == (13, 0)
