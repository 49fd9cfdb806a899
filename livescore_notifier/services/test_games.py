"""Deterministic simulated games for demos and end-to-end testing"""
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..errors import GameSourceError
from ..storage.database import Database
from ..storage.models import GameState, GameStatus, TestGameSession
from ..utils.logger import setup_logger
from ..utils.timezone import now_utc, seconds_between

logger = setup_logger(__name__)

TEST_GAME_PREFIX = "TEST_GAME_"

QUARTER_SECONDS = 12 * 60
QUARTERS = 4
TOTAL_GAME_SECONDS = QUARTER_SECONDS * QUARTERS
STATE_INTERVAL_SECONDS = 30


@dataclass(frozen=True)
class TeamInfo:
    team_id: int
    city: str
    name: str
    tricode: str
    wins: int
    losses: int

    @property
    def full_name(self) -> str:
        return f"{self.city} {self.name}"


@dataclass(frozen=True)
class GameScript:
    """Static description of a simulated game"""
    game_id: str
    label: str
    home: TeamInfo
    away: TeamInfo
    final_home_score: int
    final_away_score: int
    close_game: bool = True


@dataclass(frozen=True)
class ProgressionState:
    """Snapshot of a simulated game at a point in game time"""
    game_time_seconds: int
    period: int
    game_clock: str
    home_score: int
    away_score: int
    status: GameStatus


TEST_GAMES: Dict[str, GameScript] = {
    "lakers-celtics": GameScript(
        game_id="TEST_GAME_LAL_BOS",
        label="Lakers vs Celtics (Close Game)",
        home=TeamInfo(1610612747, "Los Angeles", "Lakers", "LAL", 45, 37),
        away=TeamInfo(1610612738, "Boston", "Celtics", "BOS", 64, 18),
        final_home_score=118,
        final_away_score=115,
        close_game=True,
    ),
}


def is_test_game_id(game_id: str) -> bool:
    return game_id.startswith(TEST_GAME_PREFIX)


def available_test_games() -> List[Dict[str, str]]:
    return [{"key": key, "label": script.label} for key, script in TEST_GAMES.items()]


def build_progression(script: GameScript) -> List[ProgressionState]:
    """
    Generate the game-time progression of a simulated game

    States are produced every 30 seconds of game time. The random walk is
    seeded from the game id, so the same script always yields the same game.
    """
    rng = random.Random(script.game_id)
    states = []
    home_score = 0
    away_score = 0

    for game_time in range(0, TOTAL_GAME_SECONDS + 1, STATE_INTERVAL_SECONDS):
        period = min(game_time // QUARTER_SECONDS + 1, QUARTERS)
        remaining = QUARTER_SECONDS - game_time % QUARTER_SECONDS
        clock = f"PT{remaining // 60:02d}M{remaining % 60:02d}.00S"

        if 0 < game_time < TOTAL_GAME_SECONDS:
            progress = game_time / TOTAL_GAME_SECONDS
            expected_home = int(script.final_home_score * progress)
            expected_away = int(script.final_away_score * progress)
            while home_score < expected_home:
                home_score += rng.choice((2, 3))
            while away_score < expected_away:
                away_score += rng.choice((2, 3))

            if script.close_game and abs(home_score - away_score) > 8:
                if home_score > away_score:
                    away_score += 3
                else:
                    home_score += 3

            # Never run past the final score before the buzzer
            home_score = min(home_score, script.final_home_score)
            away_score = min(away_score, script.final_away_score)

        status = GameStatus.LIVE
        if game_time >= TOTAL_GAME_SECONDS:
            status = GameStatus.FINAL
            home_score = script.final_home_score
            away_score = script.final_away_score

        states.append(ProgressionState(
            game_time_seconds=game_time,
            period=period,
            game_clock=clock,
            home_score=home_score,
            away_score=away_score,
            status=status,
        ))

    return states


class TestGameService:
    """Manages test game sessions and turns them into game states"""
    __test__ = False

    def __init__(
        self,
        database: Database,
        speed: float = 1.0,
        clock: Callable[[], datetime] = now_utc
    ):
        """
        Initialize test game service

        Args:
            database: Store holding test game sessions
            speed: Game seconds simulated per real second
            clock: Source of the current UTC time
        """
        self.database = database
        self.speed = speed
        self.clock = clock
        self._progressions: Dict[str, List[ProgressionState]] = {}

    def start_game(self, company_id: str, game_key: str = "lakers-celtics") -> TestGameSession:
        """Start a simulated game for a company, replacing any running one"""
        script = TEST_GAMES.get(game_key)
        if script is None:
            raise ValueError(f"Unknown test game '{game_key}'")

        self.stop_game(company_id)
        self.database.delete_inactive_test_sessions(company_id, script.game_id)
        session = self.database.create_test_session(TestGameSession(
            company_id=company_id,
            game_id=script.game_id,
            game_key=game_key,
            started_at=self.clock(),
        ))
        logger.info(f"Started test game {script.game_id} for company {company_id}")
        return session

    def stop_game(self, company_id: str):
        stopped = self.database.deactivate_test_sessions(company_id)
        if stopped:
            logger.info(f"Stopped {stopped} test game session(s) for company {company_id}")

    def get_active_session(self, company_id: str) -> Optional[TestGameSession]:
        return self.database.get_active_test_session(company_id)

    def clear_all(self) -> int:
        """Delete every test game session"""
        deleted = self.database.clear_test_sessions()
        logger.info(f"Deleted {deleted} test game session(s)")
        return deleted

    def current_progression(self, session: TestGameSession) -> ProgressionState:
        """Pick the latest progression state reached by the session's elapsed time"""
        states = self._progression_for(session.game_key)
        elapsed = seconds_between(session.started_at, self.clock()) * self.speed

        current = states[0]
        for state in states:
            if state.game_time_seconds <= elapsed:
                current = state
            else:
                break
        return current

    def to_game_state(self, session: TestGameSession) -> GameState:
        script = TEST_GAMES[session.game_key]
        progress = self.current_progression(session)
        return GameState(
            game_id=script.game_id,
            home_team=script.home.full_name,
            away_team=script.away.full_name,
            home_nickname=script.home.name,
            away_nickname=script.away.name,
            home_score=progress.home_score,
            away_score=progress.away_score,
            period=progress.period,
            status=progress.status,
            status_text="Final" if progress.status == GameStatus.FINAL else "Live",
            game_clock=progress.game_clock,
        )

    def fetch_game_state(self, game_id: str) -> GameState:
        """
        Current state of a simulated game

        Raises:
            GameSourceError: if no active session simulates this game id
        """
        session = self.database.get_active_test_session_by_game(game_id)
        if session is None or session.game_key not in TEST_GAMES:
            raise GameSourceError(f"No active test game session for {game_id}")
        return self.to_game_state(session)

    def _progression_for(self, game_key: str) -> List[ProgressionState]:
        if game_key not in self._progressions:
            self._progressions[game_key] = build_progression(TEST_GAMES[game_key])
        return self._progressions[game_key]
