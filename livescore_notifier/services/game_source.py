"""Routes game state lookups to the live feed or the test-game simulator"""
from typing import List

from ..errors import GameSourceError
from ..storage.models import GameState
from ..utils.logger import setup_logger
from .nba_client import NBAClient
from .test_games import TestGameService, is_test_game_id

logger = setup_logger(__name__)


class GameStateSource:
    """Single entry point for current game state"""

    def __init__(self, nba_client: NBAClient, test_games: TestGameService):
        self.nba_client = nba_client
        self.test_games = test_games

    def fetch_game_state(self, game_id: str) -> GameState:
        """
        Fetch the current state of a game

        Raises:
            GameSourceError: if the state cannot be fetched
        """
        if is_test_game_id(game_id):
            return self.test_games.fetch_game_state(game_id)
        return self.nba_client.fetch_game(game_id)

    def fetch_today_games(self) -> List[GameState]:
        """
        Fetch today's scoreboard, refreshing live games from their boxscores

        Scoreboard data lags behind the per-game feed; a failed refresh keeps
        the scoreboard values for that game.
        """
        games = self.nba_client.fetch_today_games()
        refreshed = []
        for game in games:
            if not game.is_live:
                refreshed.append(game)
                continue
            try:
                refreshed.append(self.nba_client.fetch_game(game.game_id))
            except GameSourceError as e:
                logger.warning(f"Could not refresh live game {game.game_id}: {e}")
                refreshed.append(game)
        return refreshed
