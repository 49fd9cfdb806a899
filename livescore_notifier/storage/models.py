"""Data models for settings, game state and notifications"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class UpdateFrequency(str, Enum):
    """How often score changes are pushed to chat"""
    EVERY_POINT = "every_point"
    EVERY_MINUTE = "every_minute"
    EVERY_QUARTER = "every_quarter"


class GameStatus(str, Enum):
    """Normalized game status"""
    SCHEDULED = "scheduled"
    LIVE = "live"
    FINAL = "final"

    @classmethod
    def from_nba_code(cls, code: int) -> "GameStatus":
        """Map the NBA live-data gameStatus (1/2/3) onto a GameStatus"""
        if code == 2:
            return cls.LIVE
        if code == 3:
            return cls.FINAL
        return cls.SCHEDULED


class EventKind(str, Enum):
    """Notification event kinds, in decision priority order"""
    GAME_START = "game_start"
    GAME_END = "game_end"
    QUARTER_END = "quarter_end"
    SCORE = "score"


@dataclass
class NotificationSettings:
    """Per-company notification configuration"""
    company_id: str
    enabled: bool = False
    channel_ids: List[str] = field(default_factory=list)
    channel_name: Optional[str] = None
    update_frequency: UpdateFrequency = UpdateFrequency.EVERY_POINT
    notify_game_start: bool = True
    notify_game_end: bool = True
    notify_quarter_end: bool = True
    tracked_games: List[str] = field(default_factory=list)
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "companyId": self.company_id,
            "enabled": self.enabled,
            "channelIds": list(self.channel_ids),
            "channelId": self.channel_ids[0] if self.channel_ids else None,
            "channelName": self.channel_name,
            "updateFrequency": self.update_frequency.value,
            "notifyGameStart": self.notify_game_start,
            "notifyGameEnd": self.notify_game_end,
            "notifyQuarterEnd": self.notify_quarter_end,
            "trackedGames": list(self.tracked_games),
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class GameNotificationState:
    """Last state we notified about for one (company, game) pair

    `version` is bumped on every write and used as the compare-and-swap token.
    """
    company_id: str
    game_id: str
    last_home_score: int = 0
    last_away_score: int = 0
    last_period: int = 0
    last_status: str = ""
    last_notified_at: Optional[datetime] = None
    version: int = 0


@dataclass
class GameState:
    """Fresh snapshot of a game, produced each polling cycle"""
    game_id: str
    home_team: str
    away_team: str
    home_score: int
    away_score: int
    period: int
    status: GameStatus
    status_text: str = ""
    game_clock: str = ""
    home_nickname: Optional[str] = None
    away_nickname: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.status == GameStatus.LIVE

    def to_dict(self) -> dict:
        return {
            "id": self.game_id,
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
            "status": self.status_text or self.status.value,
            "period": self.period,
            "gameClock": self.game_clock,
        }


@dataclass
class NotificationEvent:
    """A decided notification for one company and game"""
    kind: EventKind
    company_id: str
    game: GameState


@dataclass
class TestGameSession:
    """A running simulated game for a company"""
    __test__ = False

    company_id: str
    game_id: str
    game_key: str
    started_at: datetime
    is_active: bool = True
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "gameId": self.game_id,
            "gameKey": self.game_key,
            "startedAt": self.started_at.isoformat(),
            "isActive": self.is_active,
        }
