"""Exception hierarchy for the notifier"""
from typing import Optional


class NotifierError(Exception):
    """Base class for all notifier errors"""


class GameSourceError(NotifierError):
    """Fetching current game state failed (network, HTTP status, bad payload)"""


class WhopAPIError(NotifierError):
    """The Whop chat API rejected a request or could not be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StateStoreError(NotifierError):
    """Reading or writing persisted notification state failed"""


class SettingsError(NotifierError):
    """Notification settings submitted by an admin are invalid"""
