"""Decision persistence layer so cached plans survive restarts."""

import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import structlog

from ..errors import PersistenceError
from ..resolver.models import ResolutionPlan


@dataclass(frozen=True)
class StoredDecision:
    """Persisted cache entry for one project."""
    project_id: str
    signal_hash: str
    registry_fingerprint: str
    plan: ResolutionPlan
    updated_at: str


class DecisionStore:
    """SQLite-backed store holding the last plan per project."""

    def __init__(self, db_path: str = "decisions.db"):
        self.db_path = Path(db_path)
        self.logger = structlog.get_logger("decision.store")
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS decisions (
                    project_id TEXT PRIMARY KEY,
                    signal_hash TEXT NOT NULL,
                    registry_fingerprint TEXT NOT NULL,
                    plan_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_decisions_updated_at ON decisions(updated_at)
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self, operation: str):
        """Get database connection, converting SQLite failures to PersistenceError."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", operation=operation, error=str(e))
            raise PersistenceError(
                f"Decision store {operation} failed: {e}",
                operation=operation,
                target=str(self.db_path)
            ) from e
        finally:
            if conn:
                conn.close()

    def save_entry(
        self,
        project_id: str,
        signal_hash: str,
        registry_fingerprint: str,
        plan: ResolutionPlan
    ) -> str:
        """
        Replace the stored decision for a project.

        Returns:
            ISO timestamp recorded for the entry
        """
        with self._lock:
            with self._get_connection("save") as conn:
                now = datetime.now(timezone.utc).isoformat()

                conn.execute("""
                    INSERT OR REPLACE INTO decisions (
                        project_id, signal_hash, registry_fingerprint, plan_json, updated_at
                    ) VALUES (?, ?, ?, ?, ?)
                """, (project_id, signal_hash, registry_fingerprint, plan.to_json(), now))

                conn.commit()

        self.logger.debug("Decision stored", project_id=project_id, modules=len(plan))
        return now

    def load_entry(self, project_id: str) -> Optional[StoredDecision]:
        """Load the stored decision for a project, if any."""
        with self._get_connection("load") as conn:
            row = conn.execute("""
                SELECT * FROM decisions WHERE project_id = ?
            """, (project_id,)).fetchone()

        if row is None:
            return None
        return self._row_to_stored_decision(row)

    def delete_entry(self, project_id: str) -> bool:
        """Delete a project's decision. Returns True if one existed."""
        with self._lock:
            with self._get_connection("delete") as conn:
                cursor = conn.execute("""
                    DELETE FROM decisions WHERE project_id = ?
                """, (project_id,))
                conn.commit()
                return cursor.rowcount > 0

    def list_projects(self) -> list[str]:
        """Project ids with a stored decision, sorted."""
        with self._get_connection("list") as conn:
            rows = conn.execute("""
                SELECT project_id FROM decisions ORDER BY project_id
            """).fetchall()
        return [row["project_id"] for row in rows]

    def get_stats(self) -> dict[str, Any]:
        """Get database statistics."""
        with self._get_connection("stats") as conn:
            total = conn.execute("SELECT COUNT(*) FROM decisions").fetchone()[0]
            latest = conn.execute("SELECT MAX(updated_at) FROM decisions").fetchone()[0]

        return {
            "total_decisions": total,
            "last_updated_at": latest,
        }

    def _row_to_stored_decision(self, row: sqlite3.Row) -> StoredDecision:
        """Convert database row to StoredDecision object."""
        return StoredDecision(
            project_id=row["project_id"],
            signal_hash=row["signal_hash"],
            registry_fingerprint=row["registry_fingerprint"],
            plan=ResolutionPlan.from_json(row["plan_json"]),
            updated_at=row["updated_at"],
        )
