"""
Database module for persisting room events, occupancy stats and settings.

The tracker itself keeps everything in memory; this is the storage
collaborator that records each transition and lets a restarted process
resume its stats and id numbering. Schema versioning drops and recreates
tables when the schema changes.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import time
from typing import Any, Dict, List, Optional

from models.room_event import RoomEvent
from models.stats import OccupancyStats

# Schema version - increment when schema changes
EXPECTED_SCHEMA_VERSION = 1


class Database:
    """
    SQLite store for the occupancy monitor.

    Tables:
    - schema_meta: tracks schema version
    - room_events: one row per ENTRY/EXIT, insertion ordered
    - room_stats: single row 'main' with the latest stats snapshot
    - settings: single row 'main' with a JSON settings document

    Write errors are logged and reported through the return value; they
    never propagate into the frame loop.
    """

    def __init__(self, local_database_path: str):
        """
        Initialize the database.

        Args:
            local_database_path: Path to the SQLite database file.
        """
        self.local_database_path = local_database_path
        self.conn: Optional[sqlite3.Connection] = None

        # Create directory if it doesn't exist
        db_dir = os.path.dirname(local_database_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        logging.info(f"Database initialized at {local_database_path}")

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self.conn is None:
            self.conn = sqlite3.connect(self.local_database_path)
        return self.conn

    def _get_schema_version(self) -> Optional[int]:
        """Get current schema version from database."""
        try:
            cursor = self._get_connection().cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_meta'"
            )
            if cursor.fetchone() is None:
                return None

            cursor.execute("SELECT schema_version FROM schema_meta LIMIT 1")
            row = cursor.fetchone()
            return row[0] if row else None
        except sqlite3.Error:
            return None

    def _drop_old_tables(self) -> None:
        cursor = self._get_connection().cursor()
        for table in ("room_events", "room_stats", "settings", "schema_meta"):
            try:
                cursor.execute(f"DROP TABLE IF EXISTS {table}")
                logging.debug(f"Dropped table: {table}")
            except sqlite3.Error as e:
                logging.warning(f"Could not drop table {table}: {e}")
        self._get_connection().commit()

    def _create_schema(self) -> None:
        cursor = self._get_connection().cursor()

        cursor.execute("""
            CREATE TABLE schema_meta (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                schema_version INTEGER NOT NULL,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)

        # ts is the tracker's monotonic ms; recorded_at is wall clock seconds
        cursor.execute("""
            CREATE TABLE room_events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                kind TEXT NOT NULL,
                track_id INTEGER NOT NULL,
                ts REAL NOT NULL,
                recorded_at REAL NOT NULL
            )
        """)
        cursor.execute("CREATE INDEX idx_room_events_track ON room_events(track_id)")

        cursor.execute("""
            CREATE TABLE room_stats (
                id TEXT PRIMARY KEY,
                total_entered INTEGER NOT NULL,
                total_left INTEGER NOT NULL,
                current_in_room INTEGER NOT NULL,
                peak_occupancy INTEGER NOT NULL,
                updated_at REAL NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE settings (
                id TEXT PRIMARY KEY,
                body TEXT NOT NULL
            )
        """)

        cursor.execute(
            "INSERT INTO schema_meta (id, schema_version) VALUES (1, ?)",
            (EXPECTED_SCHEMA_VERSION,)
        )

        self._get_connection().commit()
        logging.info(f"Created schema version {EXPECTED_SCHEMA_VERSION}")

    def initialize(self) -> None:
        """
        Initialize the database schema.

        If schema_meta is missing or version doesn't match EXPECTED_SCHEMA_VERSION,
        drops all old tables and creates fresh schema.
        """
        try:
            self._get_connection()
            current_version = self._get_schema_version()

            if current_version != EXPECTED_SCHEMA_VERSION:
                if current_version is not None:
                    logging.warning(
                        f"Schema version mismatch: found {current_version}, "
                        f"expected {EXPECTED_SCHEMA_VERSION}. Dropping old tables."
                    )
                else:
                    logging.info("No schema found, creating fresh database.")

                self._drop_old_tables()
                self._create_schema()
            else:
                logging.info(f"Schema version {current_version} is current")

        except sqlite3.Error as e:
            logging.error(f"Database initialization error: {e}")
            raise

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    def save_event(self, event: RoomEvent) -> Optional[int]:
        """
        Append a room event.

        Returns:
            Row id of the inserted record, or None on error.
        """
        try:
            cursor = self._get_connection().cursor()
            cursor.execute(
                "INSERT INTO room_events (kind, track_id, ts, recorded_at) VALUES (?, ?, ?, ?)",
                (event.kind.value, event.track_id, event.timestamp, time.time()),
            )
            self._get_connection().commit()
            logging.debug(f"Room event saved: {event.kind.value} track={event.track_id}")
            return cursor.lastrowid
        except sqlite3.Error as e:
            logging.error(f"Error saving room event: {e}")
            return None

    def save_stats(self, stats: OccupancyStats) -> bool:
        try:
            self._get_connection().execute(
                """
                INSERT OR REPLACE INTO room_stats (
                    id, total_entered, total_left, current_in_room, peak_occupancy, updated_at
                ) VALUES ('main', ?, ?, ?, ?, ?)
                """,
                (
                    stats.total_entered,
                    stats.total_left,
                    stats.current_in_room,
                    stats.peak_occupancy,
                    time.time(),
                ),
            )
            self._get_connection().commit()
            return True
        except sqlite3.Error as e:
            logging.error(f"Error saving stats: {e}")
            return False

    def save_settings(self, settings: Dict[str, Any]) -> bool:
        try:
            self._get_connection().execute(
                "INSERT OR REPLACE INTO settings (id, body) VALUES ('main', ?)",
                (json.dumps(settings),),
            )
            self._get_connection().commit()
            return True
        except sqlite3.Error as e:
            logging.error(f"Error saving settings: {e}")
            return False

    def replace_events(self, events: List[RoomEvent]) -> bool:
        """Replace the whole event history (import). Events newest-first."""
        try:
            conn = self._get_connection()
            conn.execute("DELETE FROM room_events")
            now = time.time()
            conn.executemany(
                "INSERT INTO room_events (kind, track_id, ts, recorded_at) VALUES (?, ?, ?, ?)",
                [(e.kind.value, e.track_id, e.timestamp, now) for e in reversed(events)],
            )
            conn.commit()
            return True
        except sqlite3.Error as e:
            logging.error(f"Error replacing events: {e}")
            return False

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    def load_stats(self) -> Optional[OccupancyStats]:
        """Return the stored stats snapshot, or None if nothing was saved."""
        try:
            cursor = self._get_connection().cursor()
            cursor.execute(
                "SELECT total_entered, total_left, current_in_room, peak_occupancy "
                "FROM room_stats WHERE id = 'main'"
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return OccupancyStats(
                total_entered=row[0],
                total_left=row[1],
                current_in_room=row[2],
                peak_occupancy=row[3],
            )
        except sqlite3.Error as e:
            logging.error(f"Error loading stats: {e}")
            return None

    def load_events(self, limit: Optional[int] = None) -> List[RoomEvent]:
        """Return stored events newest-first (insertion order)."""
        try:
            cursor = self._get_connection().cursor()
            sql = "SELECT kind, track_id, ts FROM room_events ORDER BY id DESC"
            if limit is not None:
                cursor.execute(sql + " LIMIT ?", (int(limit),))
            else:
                cursor.execute(sql)
            return [
                RoomEvent.from_dict({"kind": k, "track_id": t, "timestamp": ts})
                for k, t, ts in cursor.fetchall()
            ]
        except sqlite3.Error as e:
            logging.error(f"Error loading events: {e}")
            return []

    def load_settings(self) -> Optional[Dict[str, Any]]:
        try:
            cursor = self._get_connection().cursor()
            cursor.execute("SELECT body FROM settings WHERE id = 'main'")
            row = cursor.fetchone()
            return json.loads(row[0]) if row else None
        except (sqlite3.Error, ValueError) as e:
            logging.error(f"Error loading settings: {e}")
            return None

    def next_track_id(self) -> int:
        """First id a resumed tracker may allocate without colliding."""
        try:
            cursor = self._get_connection().cursor()
            cursor.execute("SELECT MAX(track_id) FROM room_events")
            row = cursor.fetchone()
            return int(row[0]) + 1 if row and row[0] is not None else 1
        except sqlite3.Error as e:
            logging.error(f"Error reading max track id: {e}")
            return 1

    def count_events(self) -> int:
        try:
            cursor = self._get_connection().cursor()
            cursor.execute("SELECT COUNT(*) FROM room_events")
            return cursor.fetchone()[0]
        except sqlite3.Error as e:
            logging.error(f"Error counting events: {e}")
            return 0

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def cleanup_old_events(self, max_events: int) -> int:
        """
        Keep only the newest ``max_events`` rows.

        Returns:
            Number of rows deleted.
        """
        try:
            cursor = self._get_connection().cursor()
            cursor.execute(
                """
                DELETE FROM room_events WHERE id NOT IN (
                    SELECT id FROM room_events ORDER BY id DESC LIMIT ?
                )
                """,
                (max_events,),
            )
            self._get_connection().commit()
            deleted = cursor.rowcount
            if deleted:
                logging.info(f"Cleaned up {deleted} old room events (keeping {max_events})")
            return deleted
        except sqlite3.Error as e:
            logging.error(f"Error cleaning up events: {e}")
            return 0

    def clear_events(self) -> bool:
        """Delete the event history; stats and settings are preserved."""
        try:
            self._get_connection().execute("DELETE FROM room_events")
            self._get_connection().commit()
            logging.info("Room events cleared")
            return True
        except sqlite3.Error as e:
            logging.error(f"Error clearing events: {e}")
            return False

    def clear_all(self) -> bool:
        """Delete events and stats. Settings are kept."""
        try:
            conn = self._get_connection()
            conn.execute("DELETE FROM room_events")
            conn.execute("DELETE FROM room_stats")
            conn.commit()
            logging.info("All stored events and stats cleared")
            return True
        except sqlite3.Error as e:
            logging.error(f"Error clearing storage: {e}")
            return False

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None


class StorageListener:
    """
    Lifecycle listener that persists every event and the stats that follow it.

    Pruning to ``max_events`` runs every ``prune_every`` writes.
    """

    def __init__(self, db: Database, max_events: Optional[int] = None, prune_every: int = 50):
        self.db = db
        self.max_events = max_events
        self.prune_every = prune_every
        self._writes = 0

    def __call__(self, event: RoomEvent, stats: OccupancyStats) -> None:
        self.db.save_event(event)
        self.db.save_stats(stats)
        self._writes += 1
        if self.max_events and self._writes % self.prune_every == 0:
            self.db.cleanup_old_events(self.max_events)
