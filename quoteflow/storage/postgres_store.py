from psycopg.rows import dict_row

from quoteflow.database.connection import get_connection
from quoteflow.storage.base import BaseReportStore, report_key
from quoteflow.storage.exceptions import ReportNotFoundError


class PostgresReportStore(BaseReportStore):
    """Database operations for the analysis_reports table.

    One row per session; ``html`` holds the report and ``error_message`` the
    processor failure, never both.
    """

    def save(self, session_id: str, html: str) -> str:
        """Upsert the report row for a session."""
        key = report_key(session_id)
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO analysis_reports
                        (storage_key, session_id, html, error_message, created_at, updated_at)
                    VALUES (%s, %s, %s, NULL, NOW(), NOW())
                    ON CONFLICT (storage_key)
                    DO UPDATE SET html = EXCLUDED.html, error_message = NULL, updated_at = NOW()
                    """,
                    (key, session_id, html),
                )
            conn.commit()
        return key

    def load(self, session_id: str) -> str:
        key = report_key(session_id)
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT html FROM analysis_reports WHERE storage_key = %s",
                    (key,),
                )
                row = cur.fetchone()

        if row is None or row["html"] is None:
            raise ReportNotFoundError(f"Report not found for session {session_id}")
        return str(row["html"])

    def exists(self, session_id: str) -> bool:
        key = report_key(session_id)
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT 1 FROM analysis_reports WHERE storage_key = %s AND html IS NOT NULL",
                    (key,),
                )
                row = cur.fetchone()
        return row is not None

    def save_failure(self, session_id: str, message: str) -> None:
        """Upsert a failure row; any stored report for the session is dropped."""
        key = report_key(session_id)
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO analysis_reports
                        (storage_key, session_id, html, error_message, created_at, updated_at)
                    VALUES (%s, %s, NULL, %s, NOW(), NOW())
                    ON CONFLICT (storage_key)
                    DO UPDATE SET html = NULL, error_message = EXCLUDED.error_message,
                                  updated_at = NOW()
                    """,
                    (key, session_id, message),
                )
            conn.commit()

    def load_failure(self, session_id: str) -> str | None:
        key = report_key(session_id)
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT error_message FROM analysis_reports WHERE storage_key = %s",
                    (key,),
                )
                row = cur.fetchone()

        if row is None or row["error_message"] is None:
            return None
        return str(row["error_message"])
