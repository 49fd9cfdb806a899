"""Command-line tools for operating the notifier"""
import argparse
import json
import sys

from .components import build_components
from .config import Config
from .services.message_formatter import format_game_update_message
from .services.test_games import TEST_GAMES
from .storage.models import EventKind, GameState, GameStatus
from .utils.logger import setup_logger

logger = setup_logger(__name__)


def send_test_message(components, args) -> int:
    """Post a sample game update straight to one or more channels"""
    status = GameStatus.FINAL if args.event == EventKind.GAME_END.value else GameStatus.LIVE
    game = GameState(
        game_id="cli-test",
        home_team=args.home,
        away_team=args.away,
        home_score=args.home_score,
        away_score=args.away_score,
        period=args.period,
        status=status,
        status_text="Final" if status == GameStatus.FINAL else "Live",
        game_clock=args.clock,
    )
    message = format_game_update_message(game, EventKind(args.event))
    logger.info(f"Sending test message:\n{message}")

    result = components.dispatcher.dispatch(message, args.channel)
    if result.failed:
        logger.error(f"✗ Failed for {len(result.failed)} channel(s)")
        return 1
    logger.info(f"✓ Test message delivered to {len(result.delivered)} channel(s)")
    return 0


def run_once(components, args) -> int:
    """Run a single notification batch and print the report"""
    report = components.notification_service.process_game_notifications()
    print(json.dumps(report.to_dict(), indent=2))
    return 1 if report.failures else 0


def start_test_game(components, args) -> int:
    session = components.test_games.start_game(args.company, args.game)
    logger.info(f"✓ Test game {session.game_id} started for company {args.company}")
    logger.info(f"Add '{session.game_id}' to the company's tracked games to receive updates")
    return 0


def clear_test_games(components, args) -> int:
    deleted = components.test_games.clear_all()
    logger.info(f"✓ Deleted {deleted} test game session(s)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Live score notifier tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    send = subparsers.add_parser("send-test", help="Post a sample update to chat channels")
    send.add_argument("--channel", action="append", required=True,
                      help="Chat channel id (repeat for several channels)")
    send.add_argument("--event", choices=[k.value for k in EventKind], default=EventKind.SCORE.value)
    send.add_argument("--home", default="Los Angeles Lakers")
    send.add_argument("--away", default="Boston Celtics")
    send.add_argument("--home-score", type=int, default=52)
    send.add_argument("--away-score", type=int, default=48)
    send.add_argument("--period", type=int, default=2)
    send.add_argument("--clock", default="PT05M12.00S")
    send.set_defaults(handler=send_test_message)

    once = subparsers.add_parser("run-once", help="Run one notification batch")
    once.set_defaults(handler=run_once)

    start = subparsers.add_parser("start-test-game", help="Start a simulated game for a company")
    start.add_argument("--company", required=True)
    start.add_argument("--game", choices=sorted(TEST_GAMES), default="lakers-celtics")
    start.set_defaults(handler=start_test_game)

    clear = subparsers.add_parser("clear-test-games", help="Delete all test game sessions")
    clear.set_defaults(handler=clear_test_games)

    return parser


def main(argv=None):
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = Config()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    components = build_components(config)
    sys.exit(args.handler(components, args))


if __name__ == "__main__":
    main()
