"""SQLite database operations"""
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, List, Optional

from ..errors import StateStoreError
from ..utils.timezone import now_utc, parse_timestamp
from .models import (
    GameNotificationState,
    NotificationSettings,
    TestGameSession,
    UpdateFrequency,
)


def split_ids(value: Optional[str]) -> List[str]:
    """Split a comma-separated id column into a clean, ordered list"""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def join_ids(ids: Iterable[str]) -> str:
    """Join ids into a comma-separated column value"""
    return ",".join(str(item).strip() for item in ids if str(item).strip())


class Database:
    """SQLite store for notification settings, per-game state and test games"""

    def __init__(self, db_path: str = "data/notifier.db"):
        """Initialize database connection"""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Create tables if they don't exist"""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS notification_settings (
                    company_id TEXT PRIMARY KEY,
                    enabled INTEGER NOT NULL DEFAULT 0,
                    channel_ids TEXT NOT NULL DEFAULT '',
                    channel_name TEXT,
                    update_frequency TEXT NOT NULL DEFAULT 'every_point',
                    notify_game_start INTEGER NOT NULL DEFAULT 1,
                    notify_game_end INTEGER NOT NULL DEFAULT 1,
                    notify_quarter_end INTEGER NOT NULL DEFAULT 1,
                    tracked_games TEXT NOT NULL DEFAULT '',
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS game_notification_state (
                    company_id TEXT NOT NULL,
                    game_id TEXT NOT NULL,
                    last_home_score INTEGER NOT NULL DEFAULT 0,
                    last_away_score INTEGER NOT NULL DEFAULT 0,
                    last_period INTEGER NOT NULL DEFAULT 0,
                    last_status TEXT NOT NULL DEFAULT '',
                    last_notified_at TEXT,
                    version INTEGER NOT NULL DEFAULT 0,
                    PRIMARY KEY (company_id, game_id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS test_game_sessions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    company_id TEXT NOT NULL,
                    game_id TEXT NOT NULL,
                    game_key TEXT NOT NULL,
                    started_at TEXT NOT NULL,
                    is_active INTEGER NOT NULL DEFAULT 1
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_settings_enabled
                ON notification_settings(enabled)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_test_sessions_active
                ON test_game_sessions(company_id, is_active)
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager"""
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=10)
        except sqlite3.Error as e:
            raise StateStoreError(f"Cannot open database {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as e:
            raise StateStoreError(f"Database error: {e}") from e
        finally:
            conn.close()

    # Notification settings

    def get_settings(self, company_id: str) -> Optional[NotificationSettings]:
        """Get notification settings for a company"""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM notification_settings WHERE company_id = ?",
                (company_id,)
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_settings(row)
            return None

    def get_or_create_settings(self, company_id: str) -> NotificationSettings:
        """Get settings for a company, creating disabled defaults on first read"""
        settings = self.get_settings(company_id)
        if settings is None:
            settings = NotificationSettings(company_id=company_id)
            self.save_settings(settings)
            settings = self.get_settings(company_id)
        return settings

    def save_settings(self, settings: NotificationSettings):
        """Insert or update a company's notification settings"""
        settings.updated_at = now_utc()
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT OR REPLACE INTO notification_settings
                (company_id, enabled, channel_ids, channel_name, update_frequency,
                 notify_game_start, notify_game_end, notify_quarter_end,
                 tracked_games, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                settings.company_id,
                int(settings.enabled),
                join_ids(settings.channel_ids),
                settings.channel_name,
                settings.update_frequency.value,
                int(settings.notify_game_start),
                int(settings.notify_game_end),
                int(settings.notify_quarter_end),
                join_ids(settings.tracked_games),
                settings.updated_at.isoformat()
            ))
            conn.commit()

    def list_enabled_settings(self) -> List[NotificationSettings]:
        """Get every company's settings row that has notifications enabled"""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT * FROM notification_settings
                WHERE enabled = 1
                ORDER BY company_id ASC
            """)
            return [self._row_to_settings(row) for row in cursor.fetchall()]

    # Per-game notification state

    def get_state(self, company_id: str, game_id: str) -> Optional[GameNotificationState]:
        """Get the stored notification state for a (company, game) pair"""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT * FROM game_notification_state
                WHERE company_id = ? AND game_id = ?
            """, (company_id, game_id))
            row = cursor.fetchone()
            if row:
                return self._row_to_state(row)
            return None

    def get_or_create_state(self, company_id: str, game_id: str) -> GameNotificationState:
        """Get the stored state, lazily inserting the zeroed default row"""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT OR IGNORE INTO game_notification_state (company_id, game_id)
                VALUES (?, ?)
            """, (company_id, game_id))
            conn.commit()
            cursor.execute("""
                SELECT * FROM game_notification_state
                WHERE company_id = ? AND game_id = ?
            """, (company_id, game_id))
            return self._row_to_state(cursor.fetchone())

    def put_state(self, state: GameNotificationState, expected_version: int) -> bool:
        """
        Write new notification state if nobody else wrote since we read it

        Args:
            state: New state to store
            expected_version: Version of the row the caller based its decision on

        Returns:
            True if the write won, False if the row had already moved on
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                UPDATE game_notification_state
                SET last_home_score = ?,
                    last_away_score = ?,
                    last_period = ?,
                    last_status = ?,
                    last_notified_at = ?,
                    version = version + 1
                WHERE company_id = ? AND game_id = ? AND version = ?
            """, (
                state.last_home_score,
                state.last_away_score,
                state.last_period,
                state.last_status,
                state.last_notified_at.isoformat() if state.last_notified_at else None,
                state.company_id,
                state.game_id,
                expected_version
            ))
            conn.commit()
            won = cursor.rowcount == 1
        if won:
            state.version = expected_version + 1
        return won

    def delete_untracked_states(self, company_id: str, tracked_games: List[str]) -> int:
        """Remove state rows for games the company no longer tracks"""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            if tracked_games:
                placeholders = ",".join("?" for _ in tracked_games)
                cursor.execute(f"""
                    DELETE FROM game_notification_state
                    WHERE company_id = ? AND game_id NOT IN ({placeholders})
                """, (company_id, *tracked_games))
            else:
                cursor.execute(
                    "DELETE FROM game_notification_state WHERE company_id = ?",
                    (company_id,)
                )
            conn.commit()
            return cursor.rowcount

    def prune_old_data(self, days: int = 7) -> int:
        """
        Remove state rows that are untracked and quiet for more than `days`

        Returns:
            Number of state rows deleted
        """
        cutoff = now_utc() - timedelta(days=days)
        tracked = {
            settings.company_id: set(settings.tracked_games)
            for settings in self._all_settings()
        }
        stale = []
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM game_notification_state")
            for row in cursor.fetchall():
                state = self._row_to_state(row)
                if state.game_id in tracked.get(state.company_id, set()):
                    continue
                if state.last_notified_at and state.last_notified_at >= cutoff:
                    continue
                stale.append((state.company_id, state.game_id))

            cursor.executemany("""
                DELETE FROM game_notification_state
                WHERE company_id = ? AND game_id = ?
            """, stale)
            # Inactive test sessions have no further use
            cursor.execute("DELETE FROM test_game_sessions WHERE is_active = 0")
            conn.commit()
        return len(stale)

    # Test game sessions

    def create_test_session(self, session: TestGameSession) -> TestGameSession:
        """Store a new test game session and return it with its id"""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO test_game_sessions
                (company_id, game_id, game_key, started_at, is_active)
                VALUES (?, ?, ?, ?, ?)
            """, (
                session.company_id,
                session.game_id,
                session.game_key,
                session.started_at.isoformat(),
                int(session.is_active)
            ))
            conn.commit()
            session.id = cursor.lastrowid
        return session

    def deactivate_test_sessions(self, company_id: str) -> int:
        """Mark every active test session of a company as stopped"""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                UPDATE test_game_sessions SET is_active = 0
                WHERE company_id = ? AND is_active = 1
            """, (company_id,))
            conn.commit()
            return cursor.rowcount

    def delete_inactive_test_sessions(self, company_id: str, game_id: str):
        """Drop stopped sessions of a company for one simulated game"""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                DELETE FROM test_game_sessions
                WHERE company_id = ? AND game_id = ? AND is_active = 0
            """, (company_id, game_id))
            conn.commit()

    def get_active_test_session(self, company_id: str) -> Optional[TestGameSession]:
        """Get the active test session of a company"""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT * FROM test_game_sessions
                WHERE company_id = ? AND is_active = 1
                ORDER BY id DESC LIMIT 1
            """, (company_id,))
            row = cursor.fetchone()
            if row:
                return self._row_to_session(row)
            return None

    def get_active_test_session_by_game(self, game_id: str) -> Optional[TestGameSession]:
        """Get the most recent active session simulating a game id"""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT * FROM test_game_sessions
                WHERE game_id = ? AND is_active = 1
                ORDER BY id DESC LIMIT 1
            """, (game_id,))
            row = cursor.fetchone()
            if row:
                return self._row_to_session(row)
            return None

    def clear_test_sessions(self) -> int:
        """Delete every test game session"""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM test_game_sessions")
            conn.commit()
            return cursor.rowcount

    def _all_settings(self) -> List[NotificationSettings]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM notification_settings")
            return [self._row_to_settings(row) for row in cursor.fetchall()]

    def _row_to_settings(self, row: sqlite3.Row) -> NotificationSettings:
        """Convert database row to NotificationSettings object"""
        return NotificationSettings(
            company_id=row['company_id'],
            enabled=bool(row['enabled']),
            channel_ids=split_ids(row['channel_ids']),
            channel_name=row['channel_name'],
            update_frequency=UpdateFrequency(row['update_frequency']),
            notify_game_start=bool(row['notify_game_start']),
            notify_game_end=bool(row['notify_game_end']),
            notify_quarter_end=bool(row['notify_quarter_end']),
            tracked_games=split_ids(row['tracked_games']),
            updated_at=parse_timestamp(row['updated_at'])
        )

    def _row_to_state(self, row: sqlite3.Row) -> GameNotificationState:
        """Convert database row to GameNotificationState object"""
        return GameNotificationState(
            company_id=row['company_id'],
            game_id=row['game_id'],
            last_home_score=row['last_home_score'],
            last_away_score=row['last_away_score'],
            last_period=row['last_period'],
            last_status=row['last_status'],
            last_notified_at=parse_timestamp(row['last_notified_at']),
            version=row['version']
        )

    def _row_to_session(self, row: sqlite3.Row) -> TestGameSession:
        """Convert database row to TestGameSession object"""
        return TestGameSession(
            id=row['id'],
            company_id=row['company_id'],
            game_id=row['game_id'],
            game_key=row['game_key'],
            started_at=datetime.fromisoformat(row['started_at']),
            is_active=bool(row['is_active'])
        )
