"""Streak Tracker — persisted daily streaks with an injected clock.

Tests cover:
    - first activity creates the row with streak 1
    - same-day calls are idempotent (no increment, is_new_streak False)
    - D, D+1, D+1, D+4 sequence
    - invalid timezone returns ValidationError and writes nothing
    - get_streak creates the row lazily
    - losing the lazy row-creation race is not an error
"""

from kondo.core.errors import ValidationError
from kondo.core.streak_calendar import StreakTransition
from kondo.models.streak_state import StreakState


async def test_first_activity_creates_state(streaks, seed):
    user = await seed.user(alias="u")

    t = await streaks.record_activity(user.id, "UTC")

    assert (t.current_streak, t.max_streak, t.is_new_streak) == (1, 1, True)
    state = await seed.get(StreakState, user.id)
    assert state.current_streak == 1


async def test_same_day_is_idempotent(streaks, seed, clock):
    user = await seed.user(alias="u")
    await streaks.record_activity(user.id)
    clock.advance(hours=5)

    again = await streaks.record_activity(user.id)

    assert again.current_streak == 1
    assert again.is_new_streak is False
    assert (await seed.get(StreakState, user.id)).current_streak == 1


async def test_d_d1_d1_d4(streaks, seed, clock):
    user = await seed.user(alias="u")
    seen = []

    t = await streaks.record_activity(user.id)
    seen.append((t.current_streak, t.is_new_streak, t.was_streak_broken))
    clock.advance(days=1)
    t = await streaks.record_activity(user.id)
    seen.append((t.current_streak, t.is_new_streak, t.was_streak_broken))
    clock.advance(hours=3)
    t = await streaks.record_activity(user.id)
    seen.append((t.current_streak, t.is_new_streak, t.was_streak_broken))
    clock.advance(days=3)
    t = await streaks.record_activity(user.id)
    seen.append((t.current_streak, t.is_new_streak, t.was_streak_broken))

    assert seen == [(1, True, False), (2, True, False), (2, False, False), (1, True, True)]
    state = await seed.get(StreakState, user.id)
    assert (state.current_streak, state.max_streak) == (1, 2)


async def test_local_timezone_decides_the_day(streaks, seed, clock):
    # 12:00 UTC and 16:00 UTC are different days in Tokyo (21:00 vs 01:00 next day)
    user = await seed.user(alias="u")
    await streaks.record_activity(user.id, "Asia/Tokyo")
    clock.advance(hours=4)

    t = await streaks.record_activity(user.id, "Asia/Tokyo")

    assert t.current_streak == 2


async def test_invalid_timezone(streaks, seed):
    user = await seed.user(alias="u")

    result = await streaks.record_activity(user.id, "Nowhere/Special")

    assert isinstance(result, ValidationError)
    assert result.field == "timezone"
    assert await seed.get(StreakState, user.id) is None


async def test_get_streak_creates_row(streaks, seed):
    user = await seed.user(alias="u")

    snapshot = await streaks.get_streak(user.id)

    assert (snapshot.current_streak, snapshot.max_streak) == (0, 0)
    assert await seed.get(StreakState, user.id) is not None


async def test_lost_row_creation_race_is_idempotent(streaks, seed, monkeypatch):
    """A second first-activity that loses the insert race reads the winner's row."""
    user = await seed.user(alias="u")
    await streaks.record_activity(user.id)

    async def stale_check(user_id):
        return False

    monkeypatch.setattr(streaks, "_row_exists", stale_check)
    again = await streaks.record_activity(user.id)

    assert isinstance(again, StreakTransition)
    assert (again.current_streak, again.is_new_streak) == (1, False)
    assert len(await seed.all(StreakState)) == 1
