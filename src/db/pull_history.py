"""
Pull History Storage

Records which conversations a participation pull returned, keyed by
(admin, date). The participation pipeline never touches this table; the
calling page writes a row after a run completes.
"""

import logging
from datetime import date
from typing import List, Optional

from psycopg2.extras import Json

from .models import PullHistoryCreate, PullHistoryEntry

logger = logging.getLogger(__name__)

_COLUMNS = """
    id, pulled_by_email, pulled_by_name,
    employee_name, employee_email, employee_admin_id, employee_intercom_name,
    pull_date, conversation_count, conversation_ids,
    ai_audit_conversation_ids, ai_audit_status,
    created_at, updated_at
"""


class PullHistoryStore:
    """Insert and query conversation_pull_history rows."""

    def __init__(self, db_connection):
        """
        Args:
            db_connection: psycopg2 connection using RealDictCursor
        """
        self.db = db_connection

    def record_pull(self, pull: PullHistoryCreate) -> PullHistoryEntry:
        """Insert a pull and return the stored row."""
        with self.db.cursor() as cur:
            cur.execute(
                f"""
                INSERT INTO conversation_pull_history (
                    pulled_by_email, pulled_by_name,
                    employee_name, employee_email, employee_admin_id, employee_intercom_name,
                    pull_date, conversation_count, conversation_ids
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {_COLUMNS}
                """,
                (
                    pull.pulled_by_email,
                    pull.pulled_by_name,
                    pull.employee_name,
                    pull.employee_email,
                    pull.employee_admin_id,
                    pull.employee_intercom_name,
                    pull.pull_date,
                    pull.conversation_count,
                    Json(pull.conversation_ids),
                ),
            )
            row = cur.fetchone()

        logger.info(
            f"Recorded pull of {pull.conversation_count} conversations for admin "
            f"{pull.employee_admin_id} on {pull.pull_date}"
        )
        return self._row_to_entry(row)

    def list_pulls(
        self,
        admin_id: Optional[str] = None,
        pull_date: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[List[PullHistoryEntry], int]:
        """
        List pulls, newest first.

        Returns:
            (entries, total matching rows)
        """
        conditions = []
        params: list = []
        if admin_id:
            conditions.append("employee_admin_id = %s")
            params.append(admin_id)
        if pull_date:
            conditions.append("pull_date = %s")
            params.append(pull_date)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        with self.db.cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM conversation_pull_history
                {where}
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
                """,
                (*params, limit, offset),
            )
            rows = cur.fetchall()

            cur.execute(
                f"SELECT COUNT(*) as count FROM conversation_pull_history {where}",
                tuple(params),
            )
            total = cur.fetchone()["count"]

        return [self._row_to_entry(row) for row in rows], total

    @staticmethod
    def _row_to_entry(row: dict) -> PullHistoryEntry:
        data = dict(row)
        data["conversation_ids"] = [str(v) for v in (data.get("conversation_ids") or [])]
        data["ai_audit_conversation_ids"] = [
            str(v) for v in (data.get("ai_audit_conversation_ids") or [])
        ]
        return PullHistoryEntry(**data)
