"""
Admin mutations against the content API and reconciliation of the shared
ContentStore.

Every action follows the same path: validate and build the payload, issue
the request(s), then write the server's answer into the store. The store is
only touched after the server confirms, so a failed request leaves local
state exactly as it was. Nothing is retried automatically.
"""
import datetime
import secrets
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from flask import current_app
from marshmallow import ValidationError

from ..metrics import ADMIN_MUTATIONS_TOTAL
from ..models import AuthSession, Notice, Outcome, SyncState
from ..schemas import CREATE_PAYLOAD_SCHEMAS, UPDATE_PAYLOAD_SCHEMAS
from ..utils.constants import COLLECTION_KINDS, SITE_CONFIG_FIELDS
from .content_api import ContentApiClient, ContentApiError
from .content_store import ContentStore

SITE_KIND = 'site'

KIND_LABELS = {
    'events': 'Event',
    'programs': 'Program',
    'contacts': 'Contact',
    'gallery': 'Photo',
    'footer-links': 'Link',
    'users': 'User',
}

# A write step: (operation, payload) applied to the store once the server has answered.
Write = Tuple[str, Any]


class NoticeBoard:
    """
    Holds the single transient notice shown to an admin.

    The dismiss deadline is fixed when a notice with new text is posted.
    Reading it on every tick, or posting the same text again while it is
    still showing, does not push the deadline back.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], datetime.datetime]):
        self.ttl = datetime.timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._notice: Optional[Notice] = None
        self._lock = threading.Lock()

    def post(self, text: str) -> Notice:
        now = self._clock()
        with self._lock:
            current = self._notice
            if current is not None and current.text == text and current.expires_at > now:
                return current
            self._notice = Notice(text=text, expires_at=now + self.ttl)
            return self._notice

    def current(self) -> Optional[Notice]:
        now = self._clock()
        with self._lock:
            if self._notice is not None and self._notice.expires_at <= now:
                self._notice = None
            return self._notice

    def dismiss(self) -> None:
        with self._lock:
            self._notice = None


class AdminSyncController:
    """
    One per signed-in admin. Owns that admin's AuthSession and API client.

    `close()` is the teardown: afterwards any request still in flight is
    allowed to finish but its result is discarded instead of being written
    to the shared store.
    """

    def __init__(self, session: AuthSession, client: ContentApiClient, store: ContentStore, notices: NoticeBoard):
        self.session = session
        self.client = client
        self.store = store
        self.notices = notices
        self._alive = True
        self._states: Dict[str, SyncState] = {kind: SyncState.IDLE for kind in (SITE_KIND,) + COLLECTION_KINDS}

    @property
    def alive(self) -> bool:
        return self._alive

    def state(self, kind: str) -> SyncState:
        return self._states[kind]

    def close(self) -> None:
        if not self._alive:
            return
        self._alive = False
        user_id = self.session.user_id
        self.session.clear()
        self.client.close()
        current_app.logger.info(f"Admin session closed for user {user_id}.")

    # --- Bulk loads ---

    def reload_all(self) -> Outcome:
        """Full refetch of every resource visible to this admin."""
        if not self._alive:
            return Outcome(applied=False)
        try:
            snapshot = self.store.fetch_all(self.client, include_users=self.session.is_super_admin)
        except ContentApiError as e:
            current_app.logger.warning(f"Admin reload failed: {e.message}")
            return self._notify(False, e.message)
        if not self._alive:
            current_app.logger.info("Discarded late reload after session close.")
            return Outcome(applied=False)
        self.store.apply_snapshot(snapshot)
        return self._notify(True, 'Reloaded.')

    def refresh_users(self) -> Outcome:
        refused = self._guard_users('users')
        if refused:
            return refused
        return self._run('users', 'refresh', lambda: ('replace', self.client.list('users')), None)

    # --- Site config ---

    def save_site_patch(self, patch: Dict[str, Any]) -> Outcome:
        """Sends only allow-listed site fields; any other key is dropped before the request."""
        body = {k: v for k, v in patch.items() if k in SITE_CONFIG_FIELDS}
        dropped = sorted(set(patch) - set(body))
        if dropped:
            current_app.logger.debug(f"Site patch dropped non-editable fields: {dropped}")

        def send() -> Write:
            site = self.client.put_site(body)
            if not isinstance(site, dict):
                site = self.client.get_site()
            if not isinstance(site, dict):
                raise ContentApiError("Save failed")
            return ('site', site)

        return self._run(SITE_KIND, 'update', send, 'Saved.')

    # --- Collections ---

    def create(self, kind: str, fields: Dict[str, Any]) -> Outcome:
        refused = self._guard_users(kind)
        if refused:
            return refused
        try:
            payload = CREATE_PAYLOAD_SCHEMAS[kind]().load(fields)
        except ValidationError as e:
            return self._invalid(kind, 'create', e)

        def send() -> Write:
            row = self.client.create(kind, payload)
            if isinstance(row, dict) and row.get('id') is not None:
                return ('append', row)
            # Endpoint did not return the created row; the server assigns ids, so refetch.
            return ('replace', self.client.list(kind))

        verb = 'created' if kind == 'users' else 'added'
        return self._run(kind, 'create', send, f"{KIND_LABELS[kind]} {verb}.")

    def update(self, kind: str, record_id, patch: Dict[str, Any]) -> Outcome:
        refused = self._guard_users(kind)
        if refused:
            return refused
        merged = {**(self.store.find(kind, record_id) or {}), **patch}
        try:
            payload = UPDATE_PAYLOAD_SCHEMAS[kind]().load(merged)
        except ValidationError as e:
            return self._invalid(kind, 'update', e)

        def send() -> Write:
            row = self.client.update(kind, record_id, payload)
            if isinstance(row, dict) and row.get('id') is not None:
                return ('splice', row)
            return ('replace', self.client.list(kind))

        return self._run(kind, 'update', send, f"{KIND_LABELS[kind]} updated.")

    def delete(self, kind: str, record_id) -> Outcome:
        refused = self._guard_users(kind)
        if refused:
            return refused
        if kind == 'users':
            if self.session.user_id is None:
                # Without our own id the self-delete check cannot be made.
                current_app.logger.warning(f"Refused delete of user {record_id}: signed-in user has no id.")
                ADMIN_MUTATIONS_TOTAL.labels(kind=kind, action='delete', result='refused').inc()
                return self._notify(False, "Cannot confirm your account; user delete refused.")
            if str(record_id) == self.session.user_id:
                current_app.logger.warning(f"Refused self-delete for user {record_id}.")
                ADMIN_MUTATIONS_TOTAL.labels(kind=kind, action='delete', result='refused').inc()
                return self._notify(False, "You cannot delete your own account.")

        def send() -> Write:
            self.client.delete(kind, record_id)
            return ('remove', record_id)

        return self._run(kind, 'delete', send, f"{KIND_LABELS[kind]} deleted.")

    # --- Internals ---

    def _guard_users(self, kind: str) -> Optional[Outcome]:
        if kind == 'users' and not self.session.is_super_admin:
            ADMIN_MUTATIONS_TOTAL.labels(kind=kind, action='any', result='refused').inc()
            return self._notify(False, "Only a super admin can manage users.")
        return None

    def _invalid(self, kind: str, action: str, error: ValidationError) -> Outcome:
        current_app.logger.info(f"Rejected {action} on {kind}: {error.messages}")
        ADMIN_MUTATIONS_TOTAL.labels(kind=kind, action=action, result='invalid').inc()
        fields = ', '.join(sorted(error.messages)) if isinstance(error.messages, dict) else ''
        return self._notify(False, f"Invalid input: {fields}" if fields else "Invalid input.")

    def _notify(self, applied: bool, text: Optional[str], data: Any = None) -> Outcome:
        if text and self._alive:
            self.notices.post(text)
        return Outcome(applied=applied, notice=text, data=data)

    def _run(self, kind: str, action: str, send: Callable[[], Write], success_notice: Optional[str]) -> Outcome:
        """Idle -> Submitting -> Applied | Failed -> Idle."""
        if not self._alive:
            return Outcome(applied=False)

        self._states[kind] = SyncState.SUBMITTING
        try:
            try:
                write = send()
            except ContentApiError as e:
                self._states[kind] = SyncState.FAILED
                ADMIN_MUTATIONS_TOTAL.labels(kind=kind, action=action, result='failed').inc()
                current_app.logger.warning(f"Admin {action} on {kind} failed: {e.message}")
                return self._notify(False, e.message)

            if not self._alive:
                # The owning view is gone; a late completion must not touch shared state.
                current_app.logger.info(f"Discarded late {action} completion on {kind} after session close.")
                return Outcome(applied=False)

            self._apply(kind, write)
            self._states[kind] = SyncState.APPLIED
            ADMIN_MUTATIONS_TOTAL.labels(kind=kind, action=action, result='applied').inc()
            return self._notify(True, success_notice, data=write[1])
        finally:
            self._states[kind] = SyncState.IDLE

    def _apply(self, kind: str, write: Write) -> None:
        op, value = write
        if op == 'site':
            # Partial saves never write the site-config cache.
            self.store.set_site_config(value)
        elif op == 'append':
            self.store.append_row(kind, value)
        elif op == 'splice':
            if not self.store.splice_row(kind, value):
                self.store.append_row(kind, value)
        elif op == 'replace':
            self.store.replace_collection(kind, value)
        elif op == 'remove':
            self.store.remove_row(kind, value)
        else:
            raise ValueError(f"Unknown write operation: {op}")


class AdminSessionRegistry:
    """
    Maps an opaque per-browser key to that admin's controller.

    An entry not used for `idle_timeout` is evicted and its controller closed,
    so a browser that goes away without logging out does not keep its token
    and HTTP session alive.
    """

    def __init__(self, idle_timeout: datetime.timedelta, clock: Callable[[], datetime.datetime]):
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._entries: Dict[str, Tuple[AdminSyncController, datetime.datetime]] = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._entries)

    def open(self, controller: AdminSyncController) -> str:
        key = secrets.token_urlsafe(32)
        now = self._clock()
        with self._lock:
            stale = self._pop_idle(now)
            self._entries[key] = (controller, now)
        self._close_each(stale)
        return key

    def get(self, key: Optional[str]) -> Optional[AdminSyncController]:
        now = self._clock()
        with self._lock:
            stale = self._pop_idle(now)
            entry = self._entries.get(key) if key else None
            if entry is not None:
                controller = entry[0]
                if controller.alive:
                    self._entries[key] = (controller, now)
                else:
                    del self._entries[key]
                    controller = None
            else:
                controller = None
        self._close_each(stale)
        return controller

    def close(self, key: Optional[str]) -> None:
        if not key:
            return
        with self._lock:
            entry = self._entries.pop(key, None)
        if entry is not None:
            entry[0].close()

    def close_all(self) -> None:
        with self._lock:
            controllers = [controller for controller, _ in self._entries.values()]
            self._entries.clear()
        self._close_each(controllers)

    def _pop_idle(self, now) -> List[AdminSyncController]:
        idle = [key for key, (_, last_seen) in self._entries.items() if now - last_seen >= self.idle_timeout]
        return [self._entries.pop(key)[0] for key in idle]

    def _close_each(self, controllers) -> None:
        if controllers:
            current_app.logger.info(f"Closing {len(controllers)} admin session(s).")
        for controller in controllers:
            controller.close()
