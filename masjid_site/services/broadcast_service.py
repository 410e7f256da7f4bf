# masjid_site/services/broadcast_service.py

import datetime
import re
from typing import Any, Dict, Optional

from ..models import BroadcastStatus
from ..utils.time_utils import format_countdown, millis_between

_DATE_RE = re.compile(r'[0-9]{4}-[0-9]{2}-[0-9]{2}')
_TIME_RE = re.compile(r'[0-9]{2}:[0-9]{2}')


def parse_broadcast_datetime(date: Optional[str], time: Optional[str], tz: datetime.tzinfo) -> Optional[datetime.datetime]:
    """
    Combines an admin-entered YYYY-MM-DD date and HH:MM time into a venue-local
    instant. Anything else, including impossible dates like 2024-02-30, is
    treated as "not scheduled" and returns None.
    """
    if not date or not time:
        return None
    if not _DATE_RE.fullmatch(date) or not _TIME_RE.fullmatch(time):
        return None
    try:
        naive = datetime.datetime.strptime(f"{date} {time}", "%Y-%m-%d %H:%M")
    except ValueError:
        return None
    return naive.replace(tzinfo=tz)


def broadcast_countdown(site_config: Dict[str, Any], now: datetime.datetime) -> Optional[BroadcastStatus]:
    """
    Countdown to the scheduled broadcast, re-evaluated every tick.
    Once the broadcast time has passed the countdown stays at 00:00:00.
    """
    at = parse_broadcast_datetime(site_config.get('broadcast_date'), site_config.get('broadcast_time'), now.tzinfo)
    if at is None:
        return None
    return BroadcastStatus(
        name=site_config.get('broadcast_name') or '',
        at=at,
        countdown=format_countdown(millis_between(now, at)),
    )
