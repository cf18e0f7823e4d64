"""Streak Calendar — pure daily-streak transition in the user's local calendar.

Invariants:
    - Day comparison uses (year, month, day) tuples of the LOCAL date in the given zone
    - "Yesterday" is calendar arithmetic on the local date, never UTC-offset arithmetic
    - Naive timestamps (SQLite round-trip) are interpreted as UTC
    - Same local day as last activity -> no state change, is_new_streak=False
    - All functions are PURE: no IO, the caller passes `now`

Design Decisions:
    - zoneinfo over locale-string formatting: DST-safe, no parse round-trip
    - Frozen dataclasses: transition result is a value, persisted by the shell
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

LocalDay = tuple[int, int, int]


@dataclass(frozen=True)
class StreakSnapshot:
    """Stored streak counters before an activity."""
    current_streak: int = 0
    max_streak: int = 0
    last_activity_date: datetime | None = None


@dataclass(frozen=True)
class StreakTransition:
    """Streak counters after an activity, plus what happened."""
    current_streak: int
    max_streak: int
    last_activity_date: datetime | None
    is_new_streak: bool
    was_streak_broken: bool

    @property
    def changed(self) -> bool:
        """True when the shell must persist the new counters."""
        return self.is_new_streak


def load_timezone(name: str) -> tzinfo | None:
    """Resolve an IANA zone name. None when unknown or malformed."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def local_day(moment: datetime, tz: tzinfo) -> LocalDay:
    """Calendar day of `moment` as seen in `tz`."""
    local = as_utc(moment).astimezone(tz)
    return (local.year, local.month, local.day)


def previous_day(day: LocalDay) -> LocalDay:
    """Calendar day before `day`."""
    d = datetime(*day).date() - timedelta(days=1)
    return (d.year, d.month, d.day)


def advance_streak(
    snapshot: StreakSnapshot, now: datetime, tz: tzinfo,
) -> StreakTransition:
    """Apply one activity at `now` to the stored streak."""
    last = as_utc(snapshot.last_activity_date) if snapshot.last_activity_date else None
    today = local_day(now, tz)

    if last is not None and local_day(last, tz) == today:
        return StreakTransition(
            current_streak=snapshot.current_streak,
            max_streak=snapshot.max_streak,
            last_activity_date=last,
            is_new_streak=False,
            was_streak_broken=False,
        )

    was_streak_broken = False
    if last is None:
        current = 1
    elif local_day(last, tz) == previous_day(today):
        current = snapshot.current_streak + 1
    else:
        current = 1
        was_streak_broken = snapshot.current_streak > 0

    return StreakTransition(
        current_streak=current,
        max_streak=max(snapshot.max_streak, current),
        last_activity_date=as_utc(now),
        is_new_streak=True,
        was_streak_broken=was_streak_broken,
    )
