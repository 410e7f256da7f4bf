import datetime
import math
import re
import time
import zoneinfo
from typing import Callable, Iterator, Optional

# Upstream values may carry trailing zone text, e.g. "05:10 (SAST)".
_LEADING_TIME_RE = re.compile(r'^([0-9]{1,2}):([0-9]{2})')


def parse_time_internal(time_str):
    """
    Parses the leading H:MM / HH:MM of a time string into a datetime.time.
    Returns None if there is no valid leading time.
    """
    if not time_str or not isinstance(time_str, str):
        return None
    match = _LEADING_TIME_RE.match(time_str.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return datetime.time(hour, minute)


def format_time_12h(hhmm):
    """'18:30' -> '6:30 PM'. Unparseable input is returned unchanged."""
    if not hhmm:
        return ''
    time_obj = parse_time_internal(hhmm)
    if not time_obj:
        return hhmm
    hour = time_obj.hour % 12 or 12
    ampm = 'PM' if time_obj.hour >= 12 else 'AM'
    return f"{hour}:{time_obj.minute:02d} {ampm}"


def format_countdown(duration_ms) -> str:
    """
    Renders a duration in milliseconds as zero-padded HH:MM:SS.
    Negative durations read as 00:00:00; hours are not wrapped at 24.
    """
    total = max(0, math.floor(duration_ms / 1000))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def millis_between(start: datetime.datetime, end: datetime.datetime) -> float:
    return (end - start).total_seconds() * 1000


def get_venue_timezone(tz_name: str) -> datetime.tzinfo:
    return zoneinfo.ZoneInfo(tz_name)


class TimeSource:
    """
    Wall clock for the venue, ticking at 1 Hz.

    `clock` and `sleep` are injectable so countdowns can be driven
    deterministically.
    """

    TICK_SECONDS = 1

    def __init__(self, tz: datetime.tzinfo,
                 clock: Optional[Callable[[datetime.tzinfo], datetime.datetime]] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        self.tz = tz
        self._clock = clock or (lambda tz: datetime.datetime.now(tz))
        self._sleep = sleep or time.sleep

    def now(self) -> datetime.datetime:
        return self._clock(self.tz)

    def ticks(self, limit: Optional[int] = None) -> Iterator[datetime.datetime]:
        """
        Yields the current instant once per second, `limit` times (forever if None).
        Yielded instants are strictly increasing even if the wall clock steps back.
        """
        previous = None
        count = 0
        while limit is None or count < limit:
            if count:
                self._sleep(self.TICK_SECONDS)
            current = self.now()
            if previous is not None and current <= previous:
                current = previous + datetime.timedelta(seconds=self.TICK_SECONDS)
            previous = current
            count += 1
            yield current
