# masjid_site/services/site_runtime.py

import datetime
from typing import Any, Dict, Optional, Tuple

from flask import current_app

from .admin_sync import AdminSessionRegistry, AdminSyncController, NoticeBoard
from .broadcast_service import broadcast_countdown
from .content_api import ContentApiClient, ContentApiError
from .content_store import ContentStore
from .prayer_time_service import PrayerScheduleProvider, next_prayer_countdown
from ..utils.time_utils import TimeSource, get_venue_timezone


class SiteRuntime:
    """
    Root object owning the clock, the prayer schedule, the shared content
    store and the signed-in admin controllers for one Flask app.
    """

    def __init__(self, app=None):
        self.time_source = None
        self.store = None
        self.prayer_schedule = None
        self.admin_sessions = None
        self.config = None
        self.app = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.config = app.config
        self.time_source = TimeSource(get_venue_timezone(app.config['VENUE_TIMEZONE']))
        self.store = ContentStore(cache_key=app.config.get('SITE_CONFIG_CACHE_KEY', 'site_config_cache'))
        self.prayer_schedule = PrayerScheduleProvider(
            city=app.config['PRAYER_CITY'],
            country=app.config['PRAYER_COUNTRY'],
            method_id=app.config['PRAYER_METHOD_ID'],
        )
        self.admin_sessions = AdminSessionRegistry(
            idle_timeout=app.config.get('ADMIN_SESSION_IDLE_TIMEOUT', datetime.timedelta(hours=8)),
            clock=lambda: self.time_source.now(),
        )
        app.extensions['masjid_site'] = self
        self.app = app

    # --- Startup ---

    def startup(self) -> None:
        """First paint from the cache, then one bulk fetch. Must run inside an app context."""
        self.store.hydrate_from_cache()
        self.reload_content()

    def public_client(self) -> ContentApiClient:
        return ContentApiClient.from_config(self.config)

    def reload_content(self) -> bool:
        client = self.public_client()
        try:
            self.store.reload_all(client)
            return True
        except ContentApiError as e:
            current_app.logger.warning(f"Content reload failed, keeping current content: {e.message}")
            return False
        finally:
            client.close()

    # --- Countdown snapshot (one tick) ---

    def snapshot(self, now=None) -> Dict[str, Any]:
        now = now or self.time_source.now()
        schedule = self.prayer_schedule.schedule_for(now.date())
        next_prayer, countdown = next_prayer_countdown(now, schedule)
        return {
            'now': now,
            'nextPrayer': next_prayer,
            'countdown': countdown,
            'broadcast': broadcast_countdown(self.store.site_config, now),
        }

    # --- Admin sessions ---

    def login(self, email: str, password: str) -> Tuple[str, AdminSyncController]:
        """Signs in through the external auth service. Raises ContentApiError on failure."""
        auth_client = self.public_client()
        try:
            session = auth_client.login(email, password)
        finally:
            auth_client.close()

        controller = AdminSyncController(
            session=session,
            client=ContentApiClient.from_config(self.config, token=session.token),
            store=self.store,
            notices=NoticeBoard(self.config.get('NOTICE_TTL_SECONDS', 2.5), self.time_source.now),
        )
        key = self.admin_sessions.open(controller)
        current_app.logger.info(f"Admin {session.user_id} ({session.role}) signed in.")
        if controller.reload_all().applied:
            controller.notices.post('Logged in.')
        return key, controller

    def shutdown(self) -> None:
        """Closes every open admin session. Registered to run at process exit."""
        with self.app.app_context():
            self.admin_sessions.close_all()

    def controller_for(self, key: Optional[str]) -> Optional[AdminSyncController]:
        return self.admin_sessions.get(key)

    def logout(self, key: Optional[str]) -> None:
        self.admin_sessions.close(key)


def get_runtime() -> SiteRuntime:
    return current_app.extensions['masjid_site']
