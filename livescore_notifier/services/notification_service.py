"""Notification service: diff tracked games and push chat updates"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..errors import GameSourceError, StateStoreError
from ..storage.database import Database
from ..storage.models import NotificationEvent, NotificationSettings
from ..utils.logger import setup_logger
from ..utils.timezone import now_utc
from .decision_engine import decide_event, next_state, period_baseline
from .dispatcher import ChatDispatcher
from .game_source import GameStateSource
from .message_formatter import format_game_update_message

logger = setup_logger(__name__)


@dataclass
class BatchReport:
    """Summary of one batch run"""
    companies: int = 0
    games_checked: int = 0
    events: List[NotificationEvent] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "companies": self.companies,
            "gamesChecked": self.games_checked,
            "eventsSent": len(self.events),
            "events": [
                {"companyId": e.company_id, "gameId": e.game.game_id, "kind": e.kind.value}
                for e in self.events
            ],
            "failures": dict(self.failures),
        }


class NotificationService:
    """Service for detecting game transitions and notifying chat channels"""

    def __init__(
        self,
        database: Database,
        game_source: GameStateSource,
        dispatcher: ChatDispatcher,
        check_interval: int = 30,
        clock: Callable[[], datetime] = now_utc
    ):
        """
        Initialize notification service

        Args:
            database: Settings and state store
            game_source: Source of current game state
            dispatcher: Chat fan-out
            check_interval: Seconds between batch runs in the polling loop
            clock: Source of the current UTC time
        """
        self.database = database
        self.game_source = game_source
        self.dispatcher = dispatcher
        self.check_interval = check_interval
        self.clock = clock
        self.running = False

    async def start(self):
        """Start the polling loop"""
        self.running = True
        logger.info(f"Starting notification service (check every {self.check_interval}s)")

        while self.running:
            try:
                await asyncio.to_thread(self.process_game_notifications)
            except Exception as e:
                logger.error(f"Error in notification loop: {e}")

            await asyncio.sleep(self.check_interval)

    def stop(self):
        """Stop the polling loop"""
        self.running = False
        logger.info("Stopping notification service")

    def process_game_notifications(self, max_retries: Optional[int] = None) -> BatchReport:
        """
        Run the diff for every tracked game of every enabled company

        A failure for one game is logged and recorded in the report; the
        remaining games and companies are still processed. State store
        failures propagate.

        Args:
            max_retries: Per-channel delivery attempts for this run; the
                dispatcher default applies when omitted

        Returns:
            What was checked, sent and skipped
        """
        report = BatchReport()
        all_settings = self.database.list_enabled_settings()

        for settings in all_settings:
            if not settings.channel_ids or not settings.tracked_games:
                logger.debug(
                    f"Skipping company {settings.company_id}: "
                    f"{len(settings.channel_ids)} channel(s), {len(settings.tracked_games)} game(s)"
                )
                continue

            report.companies += 1
            for game_id in settings.tracked_games:
                report.games_checked += 1
                key = f"{settings.company_id}:{game_id}"
                try:
                    event = self.process_game(settings, game_id, max_retries=max_retries)
                    if event:
                        report.events.append(event)
                except StateStoreError:
                    raise
                except GameSourceError as e:
                    logger.warning(f"Skipping game {game_id} for company {settings.company_id}: {e}")
                    report.failures[key] = str(e)
                except Exception as e:
                    logger.error(
                        f"Error processing game {game_id} for company {settings.company_id}: {e}",
                        exc_info=True
                    )
                    report.failures[key] = str(e)

        if report.events or report.failures:
            logger.info(
                f"Batch done: {report.games_checked} game(s) checked, "
                f"{len(report.events)} notification(s), {len(report.failures)} failure(s)"
            )
        return report

    def process_game(
        self,
        settings: NotificationSettings,
        game_id: str,
        max_retries: Optional[int] = None
    ) -> Optional[NotificationEvent]:
        """
        Diff one game for one company and notify on a transition

        Args:
            settings: Company notification settings
            game_id: Tracked game id
            max_retries: Per-channel delivery attempts override

        Returns:
            The event that was sent, or None
        """
        current = self.game_source.fetch_game_state(game_id)
        prior = self.database.get_or_create_state(settings.company_id, game_id)
        now = self.clock()

        kind = decide_event(settings, prior, current, now)
        if kind is None:
            baseline = period_baseline(prior, current)
            if baseline and self.database.put_state(baseline, prior.version):
                logger.debug(f"Recorded period {current.period} baseline for game {game_id}")
            return None

        # Claim the transition before sending so overlapping runs cannot both send it
        if not self.database.put_state(next_state(prior, current, now), prior.version):
            logger.info(
                f"Game {game_id} for company {settings.company_id} already handled by another run"
            )
            return None

        message = format_game_update_message(current, kind)
        result = self.dispatcher.dispatch(message, settings.channel_ids, max_retries=max_retries)
        logger.info(
            f"Notified {kind.value} for {current.away_team} @ {current.home_team} "
            f"({current.away_score}-{current.home_score}) to "
            f"{len(result.delivered)}/{len(settings.channel_ids)} channel(s) "
            f"of company {settings.company_id}"
        )
        return NotificationEvent(kind=kind, company_id=settings.company_id, game=current)
