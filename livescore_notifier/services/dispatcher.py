"""Fan-out delivery of chat messages"""
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..errors import WhopAPIError
from ..utils.logger import setup_logger
from .whop_client import WhopClient

logger = setup_logger(__name__)


@dataclass
class DispatchResult:
    """Outcome of delivering one message to several channels"""
    delivered: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def all_delivered(self) -> bool:
        return not self.failed


class ChatDispatcher:
    """Delivers a message to every configured channel independently"""

    def __init__(
        self,
        client: WhopClient,
        max_retries: int = 3,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize dispatcher

        Args:
            client: Chat API client
            max_retries: Attempts per channel before giving up
            sleep: Sleep function used between attempts
        """
        self.client = client
        self.max_retries = max(1, max_retries)
        self.sleep = sleep

    def dispatch(
        self,
        message: str,
        channel_ids: List[str],
        max_retries: Optional[int] = None
    ) -> DispatchResult:
        """
        Send a message to all channels, continuing past failures

        Args:
            message: Formatted message text
            channel_ids: Target channel ids
            max_retries: Attempts per channel for this call; defaults to the dispatcher setting

        Returns:
            Which channels received the message and why the others did not
        """
        result = DispatchResult()
        for channel_id in channel_ids:
            try:
                self.send_with_retry(channel_id, message, max_retries=max_retries)
                result.delivered.append(channel_id)
            except WhopAPIError as e:
                logger.error(f"Failed to deliver message to channel {channel_id}: {e}")
                result.failed[channel_id] = str(e)

        if result.failed:
            logger.warning(
                f"Delivered to {len(result.delivered)}/{len(channel_ids)} channel(s); "
                f"failed: {', '.join(result.failed)}"
            )
        return result

    def send_with_retry(self, channel_id: str, message: str, max_retries: Optional[int] = None):
        """
        Send to one channel with exponential backoff

        Raises:
            WhopAPIError: the last error once every attempt failed
        """
        attempts = max(1, max_retries) if max_retries is not None else self.max_retries
        for attempt in range(attempts):
            try:
                self.client.create_message(channel_id, message)
                logger.info(f"Sent message to channel {channel_id}")
                return
            except WhopAPIError as e:
                # Client errors other than rate limiting will not improve on retry
                if e.status_code and 400 <= e.status_code < 500 and e.status_code != 429:
                    raise
                if attempt == attempts - 1:
                    raise
                wait_time = 2 ** attempt
                logger.info(f"Retrying channel {channel_id} in {wait_time} seconds after: {e}")
                self.sleep(wait_time)
