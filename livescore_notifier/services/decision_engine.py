"""Decide which notification, if any, a fresh game state warrants"""
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..storage.models import (
    EventKind,
    GameNotificationState,
    GameState,
    GameStatus,
    NotificationSettings,
    UpdateFrequency,
)
from ..utils.timezone import seconds_between

SCORE_THROTTLE_SECONDS = 60

Rule = Callable[[NotificationSettings, GameNotificationState, GameState, datetime], bool]


def is_game_start(settings, prior, current, now) -> bool:
    return (
        settings.notify_game_start
        and current.status == GameStatus.LIVE
        and prior.last_status != GameStatus.LIVE.value
    )


def is_game_end(settings, prior, current, now) -> bool:
    return (
        settings.notify_game_end
        and current.status == GameStatus.FINAL
        and prior.last_status != GameStatus.FINAL.value
    )


def is_quarter_end(settings, prior, current, now) -> bool:
    # A zero prior period is the default row, not a finished quarter
    return (
        settings.notify_quarter_end
        and prior.last_period > 0
        and current.period > prior.last_period
    )


def is_score_update(settings, prior, current, now) -> bool:
    if not current.is_live:
        return False
    if (current.home_score == prior.last_home_score
            and current.away_score == prior.last_away_score):
        return False

    frequency = settings.update_frequency
    if frequency == UpdateFrequency.EVERY_POINT:
        return True
    if frequency == UpdateFrequency.EVERY_MINUTE:
        if prior.last_notified_at is None:
            return True
        return seconds_between(prior.last_notified_at, now) >= SCORE_THROTTLE_SECONDS
    return False


RULES: List[Tuple[EventKind, Rule]] = [
    (EventKind.GAME_START, is_game_start),
    (EventKind.GAME_END, is_game_end),
    (EventKind.QUARTER_END, is_quarter_end),
    (EventKind.SCORE, is_score_update),
]


def decide_event(
    settings: NotificationSettings,
    prior: GameNotificationState,
    current: GameState,
    now: datetime
) -> Optional[EventKind]:
    """
    Pick the single event a state change should produce

    Rules are checked in priority order and the first match wins, so a poll
    that sees both a new quarter and a new score only reports the quarter.

    Args:
        settings: Company notification settings
        prior: Last recorded notification state for the game
        current: Freshly fetched game state
        now: Current UTC time

    Returns:
        The event kind to send, or None
    """
    for kind, rule in RULES:
        if rule(settings, prior, current, now):
            return kind
    return None


def next_state(
    prior: GameNotificationState,
    current: GameState,
    now: datetime
) -> GameNotificationState:
    """Build the state to record once an event has been claimed"""
    return replace(
        prior,
        last_home_score=current.home_score,
        last_away_score=current.away_score,
        last_period=current.period,
        last_status=current.status.value,
        last_notified_at=now,
    )


def period_baseline(
    prior: GameNotificationState,
    current: GameState
) -> Optional[GameNotificationState]:
    """
    Record the first period seen for a game when no event fired

    Quarter-end needs a non-zero prior period to compare against. Scores and
    last_notified_at are left as they were so pending score changes and the
    per-minute throttle are unaffected.

    Returns:
        The state to write, or None when a baseline is already recorded
    """
    if prior.last_period > 0 or current.period <= 0:
        return None
    return replace(prior, last_period=current.period, last_status=current.status.value)
