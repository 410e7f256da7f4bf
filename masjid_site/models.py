# masjid_site/models.py
"""
Plain data types shared by the services and routes.

Nothing here is persisted locally: the content API is the source of truth
and the upstream prayer-time provider owns the schedule.
"""
import datetime
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .utils.constants import Roles

# Six keys (Fajr..Isha) mapped to "HH:MM" local times.
PrayerSchedule = Dict[str, str]


@dataclass(frozen=True)
class ResolvedNextPrayer:
    key: str
    at: datetime.datetime
    is_tomorrow: bool = False


@dataclass(frozen=True)
class BroadcastStatus:
    name: str
    at: datetime.datetime
    countdown: str


# --- Tagged load state ---
# Values that arrive asynchronously are always one of these three, so callers
# branch on the tag rather than on whether a result happens to exist yet.

@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Ready:
    value: Any


@dataclass(frozen=True)
class Failed:
    error: str


LOADING = Loading()


def ready_value(state, default=None):
    """Returns the wrapped value for a Ready state, else `default`."""
    if isinstance(state, Ready):
        return state.value
    return default


@dataclass
class AuthSession:
    """
    Identity handed out by the external `/auth/login` service.
    Owned by exactly one AdminSyncController; `clear()` is its teardown.
    """
    token: Optional[str]
    user: Optional[Dict[str, Any]]

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and bool(self.user)

    @property
    def user_id(self) -> Optional[str]:
        if not self.user or self.user.get('id') is None:
            return None
        return str(self.user.get('id'))

    @property
    def role(self) -> Optional[str]:
        return (self.user or {}).get('role')

    @property
    def is_super_admin(self) -> bool:
        return self.role == Roles.SUPER_ADMIN

    def clear(self) -> None:
        self.token = None
        self.user = None


class SyncState(enum.Enum):
    IDLE = 'idle'
    SUBMITTING = 'submitting'
    APPLIED = 'applied'
    FAILED = 'failed'


@dataclass(frozen=True)
class Notice:
    text: str
    expires_at: datetime.datetime

    def remaining_ms(self, now: datetime.datetime) -> int:
        return max(0, int((self.expires_at - now).total_seconds() * 1000))


@dataclass(frozen=True)
class Outcome:
    """Result of one admin action as seen by the page that triggered it."""
    applied: bool
    notice: Optional[str] = None
    data: Any = field(default=None, compare=False)
