"""Wiring of the notifier's services from configuration"""
from dataclasses import dataclass

from .config import Config
from .services.dispatcher import ChatDispatcher
from .services.game_source import GameStateSource
from .services.nba_client import NBAClient
from .services.notification_service import NotificationService
from .services.settings_service import SettingsService
from .services.test_games import TestGameService
from .services.whop_client import WhopClient
from .storage.database import Database


@dataclass
class Components:
    config: Config
    database: Database
    whop_client: WhopClient
    dispatcher: ChatDispatcher
    test_games: TestGameService
    game_source: GameStateSource
    settings_service: SettingsService
    notification_service: NotificationService


def build_components(config: Config) -> Components:
    """Build every service the notifier needs from a loaded Config"""
    database = Database(db_path=config.database_path)
    whop_client = WhopClient(
        api_key=config.whop_api_key,
        base_url=config.whop_api_base,
        timeout=config.http_timeout
    )
    dispatcher = ChatDispatcher(whop_client, max_retries=config.dispatch_max_retries)
    test_games = TestGameService(database, speed=config.test_game_speed)
    game_source = GameStateSource(
        NBAClient(base_url=config.nba_api_base, timeout=config.http_timeout),
        test_games
    )
    notification_service = NotificationService(
        database=database,
        game_source=game_source,
        dispatcher=dispatcher,
        check_interval=config.poll_interval
    )
    return Components(
        config=config,
        database=database,
        whop_client=whop_client,
        dispatcher=dispatcher,
        test_games=test_games,
        game_source=game_source,
        settings_service=SettingsService(database),
        notification_service=notification_service,
    )
