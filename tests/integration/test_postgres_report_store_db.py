import uuid

import pytest

from quoteflow.database.connection import get_connection
from quoteflow.storage.exceptions import ReportNotFoundError
from quoteflow.storage.postgres_store import PostgresReportStore


@pytest.fixture
def session_id(integration_pool: None):  # type: ignore[no-untyped-def]
    sid = str(uuid.uuid4())
    yield sid
    with get_connection() as conn:
        conn.execute("DELETE FROM analysis_reports WHERE session_id = %s", (sid,))
        conn.commit()


class TestPostgresReportStore:
    def test_save_then_load(self, session_id: str) -> None:
        store = PostgresReportStore()

        store.save(session_id, "<html>v1</html>")

        assert store.exists(session_id) is True
        assert store.load(session_id) == "<html>v1</html>"

    def test_save_overwrites(self, session_id: str) -> None:
        store = PostgresReportStore()
        store.save(session_id, "<html>v1</html>")

        store.save(session_id, "<html>v2</html>")

        assert store.load(session_id) == "<html>v2</html>"

    def test_missing_report(self, session_id: str) -> None:
        store = PostgresReportStore()

        assert store.exists(session_id) is False
        with pytest.raises(ReportNotFoundError):
            store.load(session_id)

    def test_failure_then_report(self, session_id: str) -> None:
        store = PostgresReportStore()

        store.save_failure(session_id, "unreadable quote")
        assert store.exists(session_id) is False
        assert store.load_failure(session_id) == "unreadable quote"

        store.save(session_id, "<html>v1</html>")
        assert store.load_failure(session_id) is None
        assert store.load(session_id) == "<html>v1</html>"
