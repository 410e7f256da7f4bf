import datetime
import threading
from typing import Optional, Tuple

from flask import current_app

from ..models import LOADING, Failed, PrayerSchedule, Ready, ResolvedNextPrayer, ready_value
from ..utils.constants import PRAYER_ORDER
from ..utils.time_utils import format_countdown, millis_between, parse_time_internal


def get_selected_api_adapter():
    """
    Instantiates and returns the API adapter based on configuration.
    """
    adapter_name = current_app.config.get('PRAYER_API_ADAPTER', "AlAdhanAdapter")
    base_url = current_app.config.get('PRAYER_API_BASE_URL')
    timeout = current_app.config.get('PRAYER_API_TIMEOUT', 10)

    if adapter_name == "AlAdhanAdapter":
        if not base_url:
            current_app.logger.error("AlAdhan API base URL is not configured.")
            return None
        from .api_adapters.aladhan_adapter import AlAdhanAdapter
        return AlAdhanAdapter(base_url=base_url, timeout=timeout)
    else:
        current_app.logger.error(f"Unsupported Prayer API Adapter: {adapter_name}")
        return None


def resolve_next_prayer(now: datetime.datetime, schedule: Optional[PrayerSchedule]) -> Optional[ResolvedNextPrayer]:
    """
    Returns the first prayer (in fixed Fajr..Isha order) whose instant today is
    strictly after `now`. Once Isha has passed, tomorrow's Fajr is returned with
    `is_tomorrow` set. Entries that do not parse are skipped.
    Pure: must be re-evaluated on every tick.
    """
    if schedule is None:
        return None

    today = now.date()
    for key in PRAYER_ORDER:
        time_obj = parse_time_internal(schedule.get(key))
        if time_obj is None:
            continue
        candidate = datetime.datetime.combine(today, time_obj, tzinfo=now.tzinfo)
        if candidate > now:
            return ResolvedNextPrayer(key=key, at=candidate)

    fajr = parse_time_internal(schedule.get('Fajr'))
    if fajr is None:
        return None
    tomorrow = today + datetime.timedelta(days=1)
    return ResolvedNextPrayer(
        key='Fajr',
        at=datetime.datetime.combine(tomorrow, fajr, tzinfo=now.tzinfo),
        is_tomorrow=True,
    )


def next_prayer_countdown(now: datetime.datetime, schedule: Optional[PrayerSchedule]) -> Tuple[Optional[ResolvedNextPrayer], Optional[str]]:
    """Resolves the next prayer and renders the time left until it."""
    next_prayer = resolve_next_prayer(now, schedule)
    if next_prayer is None:
        return None, None
    return next_prayer, format_countdown(millis_between(now, next_prayer.at))


class PrayerScheduleProvider:
    """
    Today's schedule for the configured city.

    State is Loading until the first fetch for a day completes, then
    Ready(schedule) or Failed(error). Only a page load (`current`) retries a
    failed day; the once-a-second countdown reads through `peek`, which fetches
    at most once per calendar day. A Ready day is kept for the process lifetime.

    The upstream request runs outside the lock. While one is in flight, other
    callers get the current state back immediately instead of queueing.
    """

    def __init__(self, city, country, method_id):
        self.city = city
        self.country = country
        self.method_id = method_id
        self._day = None
        self._state = LOADING
        self._in_flight = False
        self._lock = threading.Lock()

    @property
    def state(self):
        return self._state

    def current(self, today: datetime.date):
        """Page-load path: fetches unless today's schedule is Ready or already being fetched."""
        return self._load(today, retry_failed=True)

    def peek(self, today: datetime.date):
        """Tick path: never retries a failed day."""
        return self._load(today, retry_failed=False)

    def schedule_for(self, today: datetime.date) -> Optional[PrayerSchedule]:
        return ready_value(self.peek(today))

    def _load(self, today, retry_failed):
        with self._lock:
            if self._in_flight:
                return self._state if self._day == today else LOADING
            if self._day == today:
                if isinstance(self._state, Ready):
                    return self._state
                if isinstance(self._state, Failed) and not retry_failed:
                    return self._state
            self._day = today
            self._state = LOADING
            self._in_flight = True

        state = LOADING
        try:
            state = self._fetch()
        finally:
            with self._lock:
                self._in_flight = False
                if self._day == today:
                    self._state = state
        return state

    def _fetch(self):
        adapter = get_selected_api_adapter()
        if not adapter:
            return Failed("No prayer time adapter configured")

        timings = adapter.fetch_city_timings(self.city, self.country, self.method_id)
        if timings is None:
            current_app.logger.warning(f"Prayer schedule unavailable for {self.city}; showing no next prayer.")
            return Failed("Prayer times unavailable")
        return Ready(timings)
