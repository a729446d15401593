from pathlib import Path

from quoteflow.storage.base import BaseReportStore, failure_key, report_key
from quoteflow.storage.exceptions import ReportNotFoundError, ReportStoreError


class LocalReportStore(BaseReportStore):
    """Stores reports as files: {reports_root}/{session_id}.html

    Failures sit next to them as {session_id}.error.txt.
    """

    def __init__(self, reports_root: Path) -> None:
        self._reports_root = reports_root

    def save(self, session_id: str, html: str) -> str:
        key = report_key(session_id)
        self._write(key, html)
        (self._reports_root / failure_key(session_id)).unlink(missing_ok=True)
        return key

    def load(self, session_id: str) -> str:
        path = self._reports_root / report_key(session_id)
        if not path.exists():
            raise ReportNotFoundError(f"Report not found for session {session_id}")
        return path.read_text(encoding="utf-8")

    def exists(self, session_id: str) -> bool:
        return (self._reports_root / report_key(session_id)).exists()

    def save_failure(self, session_id: str, message: str) -> None:
        self._write(failure_key(session_id), message)
        (self._reports_root / report_key(session_id)).unlink(missing_ok=True)

    def load_failure(self, session_id: str) -> str | None:
        path = self._reports_root / failure_key(session_id)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, key: str, text: str) -> None:
        try:
            self._reports_root.mkdir(parents=True, exist_ok=True)
            (self._reports_root / key).write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ReportStoreError(f"Could not write {key}: {exc}") from exc
