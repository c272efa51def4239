"""Per-request application context passed to every tracker component."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from fittrack.config import Settings, settings as default_settings
from fittrack.tracker.store import UserStore


def _local_today(tz_name: str) -> Callable[[], date]:
    def today() -> date:
        return datetime.now(ZoneInfo(tz_name)).date()

    return today


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class TrackerContext:
    """The signed-in user's store plus settings and clock.

    `today` is the user's calendar day in the configured timezone; tests
    replace it with a fixed date.
    """

    store: UserStore
    settings: Settings = field(default_factory=lambda: default_settings)
    today: Callable[[], date] | None = None
    now: Callable[[], datetime] = _utc_now

    def __post_init__(self) -> None:
        if self.today is None:
            self.today = _local_today(self.settings.default_tz)

    @property
    def user_key(self) -> str:
        return self.store.user_key
