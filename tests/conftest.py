from datetime import datetime, timedelta

import pytest

from livescore_notifier.errors import GameSourceError, WhopAPIError
from livescore_notifier.services.dispatcher import ChatDispatcher
from livescore_notifier.services.notification_service import NotificationService
from livescore_notifier.storage.database import Database
from livescore_notifier.storage.models import GameState, GameStatus, NotificationSettings


class FakeClock:
    """Callable clock that only moves when told to"""

    def __init__(self, start=None):
        self.now = start or datetime(2025, 10, 27, 20, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


class FakeWhopClient:
    """Records posted messages; channels in fail_channels raise"""

    def __init__(self, fail_channels=()):
        self.fail_channels = set(fail_channels)
        self.messages = []
        self.attempts = []

    def create_message(self, channel_id, content):
        self.attempts.append(channel_id)
        if channel_id in self.fail_channels:
            raise WhopAPIError(f"channel {channel_id} unavailable", status_code=503)
        self.messages.append((channel_id, content))
        return {"id": f"msg_{len(self.messages)}", "content": content}

    def list_chat_channels(self, company_id):
        return [{"id": "chat_1", "experience": {"id": "exp_1", "name": "Scores"}}]


class FakeGameSource:
    """Serves preset game states; exceptions are raised instead of returned"""

    def __init__(self, games=None):
        self.games = dict(games or {})

    def fetch_game_state(self, game_id):
        value = self.games.get(game_id)
        if value is None:
            raise GameSourceError(f"unknown game {game_id}")
        if isinstance(value, Exception):
            raise value
        return value

    def fetch_today_games(self):
        return [g for g in self.games.values() if isinstance(g, GameState)]


def make_game(game_id="0022500001", home=0, away=0, period=0,
              status=GameStatus.SCHEDULED, clock="", status_text=""):
    return GameState(
        game_id=game_id,
        home_team="Los Angeles Lakers",
        away_team="Boston Celtics",
        home_nickname="Lakers",
        away_nickname="Celtics",
        home_score=home,
        away_score=away,
        period=period,
        status=status,
        status_text=status_text,
        game_clock=clock,
    )


@pytest.fixture()
def database(tmp_path):
    return Database(db_path=str(tmp_path / "notifier.db"))


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def whop_client():
    return FakeWhopClient()


@pytest.fixture()
def game_source():
    return FakeGameSource()


@pytest.fixture()
def dispatcher(whop_client):
    return ChatDispatcher(whop_client, max_retries=2, sleep=lambda seconds: None)


@pytest.fixture()
def service(database, game_source, dispatcher, clock):
    return NotificationService(
        database=database,
        game_source=game_source,
        dispatcher=dispatcher,
        clock=clock
    )


@pytest.fixture()
def enabled_settings(database):
    settings = NotificationSettings(
        company_id="biz_1",
        enabled=True,
        channel_ids=["chat_1"],
        tracked_games=["0022500001"],
    )
    database.save_settings(settings)
    return settings


@pytest.fixture()
def env(monkeypatch, tmp_path):
    monkeypatch.setenv("WHOP_API_KEY", "test_key")
    monkeypatch.setenv("WHOP_APP_SECRET", "app_secret")
    monkeypatch.setenv("CRON_SECRET", "cron_secret")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "app.db"))
    monkeypatch.delenv("WHOP_COMPANY_ID", raising=False)
    return monkeypatch
