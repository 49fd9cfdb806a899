"""Validation and persistence of admin notification settings"""
from typing import Any, Dict, List

from ..errors import SettingsError
from ..storage.database import Database, split_ids
from ..storage.models import NotificationSettings, UpdateFrequency
from ..utils.logger import setup_logger

logger = setup_logger(__name__)

_BOOL_FIELDS = {
    "enabled": "enabled",
    "notifyGameStart": "notify_game_start",
    "notifyGameEnd": "notify_game_end",
    "notifyQuarterEnd": "notify_quarter_end",
}


def _id_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return split_ids(str(value))


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise SettingsError(f"{name} must be a boolean")


class SettingsService:
    """Reads and updates per-company notification settings"""

    def __init__(self, database: Database):
        self.database = database

    def get_settings(self, company_id: str) -> NotificationSettings:
        if not company_id:
            raise SettingsError("company_id is required")
        return self.database.get_or_create_settings(company_id)

    def update_settings(self, payload: Dict[str, Any]) -> NotificationSettings:
        """
        Apply an admin settings payload

        Only keys present in the payload are changed. `channelIds` wins over
        the single `channelId`; both may be lists or comma-separated strings,
        as may `trackedGames`.

        Raises:
            SettingsError: on a missing company id, unknown update frequency,
                non-boolean toggle, or enabling without a channel
        """
        company_id = str(payload.get("companyId") or "").strip()
        if not company_id:
            raise SettingsError("companyId is required")

        settings = self.database.get_or_create_settings(company_id)
        previous_games = list(settings.tracked_games)

        if "channelIds" in payload and payload["channelIds"] is not None:
            settings.channel_ids = _id_list(payload["channelIds"])
        elif "channelId" in payload:
            settings.channel_ids = _id_list(payload["channelId"])

        if "channelName" in payload:
            settings.channel_name = payload["channelName"] or None

        if payload.get("updateFrequency") is not None:
            try:
                settings.update_frequency = UpdateFrequency(payload["updateFrequency"])
            except ValueError:
                allowed = ", ".join(f.value for f in UpdateFrequency)
                raise SettingsError(f"updateFrequency must be one of: {allowed}") from None

        for key, attr in _BOOL_FIELDS.items():
            if payload.get(key) is not None:
                setattr(settings, attr, _as_bool(key, payload[key]))

        if "trackedGames" in payload:
            settings.tracked_games = list(dict.fromkeys(_id_list(payload["trackedGames"])))

        if settings.enabled and not settings.channel_ids:
            raise SettingsError("No channel configured. Select a channel before enabling notifications.")

        self.database.save_settings(settings)

        if set(previous_games) - set(settings.tracked_games):
            removed = self.database.delete_untracked_states(company_id, settings.tracked_games)
            logger.info(f"Removed {removed} state row(s) for untracked games of company {company_id}")

        logger.info(
            f"Saved notification settings for company {company_id}: "
            f"enabled={settings.enabled}, {len(settings.channel_ids)} channel(s), "
            f"{len(settings.tracked_games)} tracked game(s)"
        )
        return settings
