"""Client for the NBA.com public live-data feeds"""
import time
from typing import Any, Dict, List, Optional
import requests

from ..errors import GameSourceError
from ..storage.models import GameState, GameStatus
from ..utils.logger import setup_logger

logger = setup_logger(__name__)

NBA_API_BASE = "https://cdn.nba.com/static/json/liveData"

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
}


def _to_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _full_name(team: Dict[str, Any]) -> str:
    return f"{team.get('teamCity', '')} {team.get('teamName', '')}".strip()


def parse_game(payload: Dict[str, Any], game_id: Optional[str] = None) -> GameState:
    """
    Convert an NBA live-data game object (boxscore or scoreboard) to GameState

    Args:
        payload: The `game` object from a boxscore or an entry of `scoreboard.games`
        game_id: Id to use if the payload does not carry one

    Returns:
        Normalized game state
    """
    home = payload.get("homeTeam") or {}
    away = payload.get("awayTeam") or {}

    period = payload.get("period")
    if isinstance(period, dict):
        period = period.get("current")

    return GameState(
        game_id=str(payload.get("gameId") or game_id or ""),
        home_team=_full_name(home),
        away_team=_full_name(away),
        home_nickname=home.get("teamName") or None,
        away_nickname=away.get("teamName") or None,
        home_score=_to_int(home.get("score")),
        away_score=_to_int(away.get("score")),
        period=_to_int(period),
        status=GameStatus.from_nba_code(_to_int(payload.get("gameStatus"))),
        status_text=str(payload.get("gameStatusText") or "").strip(),
        game_clock=str(payload.get("gameClock") or ""),
    )


class NBAClient:
    """Fetcher for NBA scoreboard and boxscore JSON"""

    def __init__(self, base_url: str = NBA_API_BASE, timeout: int = 15):
        """
        Initialize NBA client

        Args:
            base_url: Base URL of the live-data CDN
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def fetch_game(self, game_id: str) -> GameState:
        """
        Fetch the current state of one game from its boxscore feed

        Raises:
            GameSourceError: on network errors, non-2xx responses or a missing game
        """
        url = f"{self.base_url}/boxscore/boxscore_{game_id}.json"
        data = self._get_json(url)
        game = data.get("game")
        if not game:
            raise GameSourceError(f"Game {game_id} not found in boxscore feed")
        return parse_game(game, game_id)

    def fetch_today_games(self) -> List[GameState]:
        """Fetch today's scoreboard"""
        url = f"{self.base_url}/scoreboard/todaysScoreboard_00.json"
        data = self._get_json(url)
        games = (data.get("scoreboard") or {}).get("games") or []
        logger.debug(f"Parsed {len(games)} games from today's scoreboard")
        return [parse_game(game) for game in games]

    def _get_json(self, url: str) -> Dict[str, Any]:
        try:
            logger.debug(f"Fetching {url}")
            response = requests.get(
                url,
                params={"t": int(time.time() * 1000)},
                headers=NO_CACHE_HEADERS,
                timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise GameSourceError(f"Failed to fetch {url}: {e}") from e
        except ValueError as e:
            raise GameSourceError(f"Invalid JSON from {url}: {e}") from e
