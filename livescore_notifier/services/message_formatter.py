"""Chat message formatting for game updates"""
import math
import re
from typing import Optional

from ..storage.models import EventKind, GameState

_ISO_CLOCK = re.compile(r'PT(\d+)M([\d.]+)S', re.I)


def readable_clock(game_clock: Optional[str]) -> str:
    """
    Turn an NBA ISO-8601 clock like 'PT09M43.00S' into '09:43'

    Clocks that are not in that format are returned unchanged.
    """
    if not game_clock:
        return ""
    match = _ISO_CLOCK.search(game_clock)
    if not match:
        return game_clock
    minutes = match.group(1)
    seconds = math.floor(float(match.group(2)))
    return f"{minutes}:{seconds:02d}"


def format_game_update_message(game: GameState, kind: Optional[EventKind] = None) -> str:
    """
    Format a game update for chat

    Args:
        game: Game state to describe
        kind: Event that triggered the message; None renders a plain update

    Returns:
        Formatted message string
    """
    away_label = game.away_nickname or game.away_team
    home_label = game.home_nickname or game.home_team

    lines = [
        f"{game.away_team} @ {game.home_team}",
        "",
        f"Score: {away_label} {game.away_score} - {game.home_score} {home_label}",
        "",
    ]

    if kind == EventKind.GAME_START:
        lines.append("🏀 Game Starting!")
    elif kind == EventKind.GAME_END:
        lines.append("🏁 Final")
    elif kind == EventKind.QUARTER_END:
        lines.append(f"⏰ End of Q{game.period}")
    elif game.period > 0:
        clock = readable_clock(game.game_clock)
        lines.append(f"📊 Q{game.period} • {clock}" if clock else f"📊 Q{game.period}")
    else:
        lines.append(f"📅 {game.status_text or game.status.value}")

    return "\n".join(lines)
