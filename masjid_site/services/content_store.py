import json
import threading
from typing import Any, Dict, List, Optional

from flask import current_app
from redis import exceptions as redis_exceptions

from ..extensions import redis_client
from ..metrics import CACHE_HITS, CACHE_MISSES
from ..models import LOADING, Ready
from ..utils.constants import COLLECTION_KINDS, DEFAULT_SITE, PUBLIC_COLLECTION_KINDS


def _same_id(row, record_id) -> bool:
    return isinstance(row, dict) and row.get('id') is not None and str(row.get('id')) == str(record_id)


def _sort_footer_links(rows):
    def sort_key(row):
        try:
            return int(row.get('sort_order') or 0)
        except (TypeError, ValueError):
            return 0
    return sorted(rows, key=sort_key)


def _cache_get_json(key: str) -> Optional[Dict[str, Any]]:
    """Helper function to safely get and deserialize a JSON object from Redis."""
    try:
        cached_data = redis_client.get(key)
        if cached_data:
            return json.loads(cached_data)
        return None
    except (redis_exceptions.RedisError, json.JSONDecodeError) as e:
        current_app.logger.error(f"Redis GET or JSON load failed for key {key}: {e}", exc_info=True)
        return None


def _cache_set_json(key: str, value: Any) -> None:
    """Helper function to safely serialize and set a JSON object in Redis."""
    try:
        redis_client.set(key, json.dumps(value))
    except redis_exceptions.RedisError as e:
        current_app.logger.error(f"Redis SET failed for key {key}: {e}", exc_info=True)


class ContentStore:
    """
    In-memory copy of the site content. The content API is authoritative;
    rows are kept exactly as the server returned them.

    The cached site-config document only serves first paint. It is written
    by `reload_all` alone, never by partial saves, and never sent back to
    the server.
    """

    def __init__(self, cache_key: str = 'site_config_cache'):
        self.cache_key = cache_key
        self.site_state = LOADING
        self.site_config: Dict[str, Any] = dict(DEFAULT_SITE)
        self._collections: Dict[str, List[Dict[str, Any]]] = {kind: [] for kind in COLLECTION_KINDS}
        self._lock = threading.RLock()

    # --- Reads ---

    @property
    def site_ready(self) -> bool:
        return isinstance(self.site_state, Ready)

    def collection(self, kind: str) -> List[Dict[str, Any]]:
        return list(self._collections[kind])

    def find(self, kind: str, record_id) -> Optional[Dict[str, Any]]:
        for row in self._collections[kind]:
            if _same_id(row, record_id):
                return row
        return None

    # --- Startup ---

    def hydrate_from_cache(self) -> bool:
        """Seeds the site config from the cache for first paint. Returns True on a hit."""
        cached = _cache_get_json(self.cache_key)
        if not isinstance(cached, dict):
            CACHE_MISSES.labels(cache_type='site_config').inc()
            current_app.logger.info("Site config cache MISS; using defaults until the first fetch.")
            return False
        CACHE_HITS.labels(cache_type='site_config').inc()
        with self._lock:
            self.site_config = {**DEFAULT_SITE, **cached}
            self.site_state = Ready(self.site_config)
        current_app.logger.info("Site config cache HIT; seeded first paint from cache.")
        return True

    def reload_all(self, client, include_users: bool = False) -> None:
        """
        Bulk-fetches the site config and every collection. All requests must
        succeed before anything is applied; errors propagate to the caller.
        """
        self.apply_snapshot(self.fetch_all(client, include_users=include_users))

    @staticmethod
    def fetch_all(client, include_users: bool = False) -> Dict[str, Any]:
        snapshot = {'site': client.get_site()}
        for kind in PUBLIC_COLLECTION_KINDS:
            snapshot[kind] = client.list(kind)
        if include_users:
            snapshot['users'] = client.list('users')
        return snapshot

    def apply_snapshot(self, snapshot: Dict[str, Any]) -> None:
        """Applies a full fetch. This is the only path that writes the site-config cache."""
        site = snapshot.get('site')
        fetched = {kind: rows for kind, rows in snapshot.items() if kind != 'site'}

        with self._lock:
            if isinstance(site, dict):
                self.site_config = site
                self.site_state = Ready(site)
            for kind, rows in fetched.items():
                self._replace(kind, rows)

        if isinstance(site, dict):
            _cache_set_json(self.cache_key, site)
        current_app.logger.info(f"Content reloaded: {', '.join(f'{k}={len(v)}' for k, v in fetched.items())}")

    # --- Reconciliation (called only after server confirmation) ---

    def set_site_config(self, site: Dict[str, Any]) -> None:
        with self._lock:
            self.site_config = site
            self.site_state = Ready(site)

    def replace_collection(self, kind: str, rows: List[Dict[str, Any]]) -> None:
        with self._lock:
            self._replace(kind, rows)

    def append_row(self, kind: str, row: Dict[str, Any]) -> None:
        with self._lock:
            rows = [r for r in self._collections[kind] if not _same_id(r, row.get('id'))]
            rows.append(row)
            self._replace(kind, rows)

    def splice_row(self, kind: str, row: Dict[str, Any]) -> bool:
        """Swaps in the row with the same id, keeping every other row and the order. False if absent."""
        with self._lock:
            current = self._collections[kind]
            if not any(_same_id(r, row.get('id')) for r in current):
                return False
            self._replace(kind, [row if _same_id(r, row.get('id')) else r for r in current])
            return True

    def remove_row(self, kind: str, record_id) -> None:
        with self._lock:
            self._replace(kind, [r for r in self._collections[kind] if not _same_id(r, record_id)])

    def _replace(self, kind: str, rows: List[Dict[str, Any]]) -> None:
        rows = list(rows or [])
        if kind == 'footer-links':
            rows = _sort_footer_links(rows)
        self._collections[kind] = rows
