import uuid
from abc import ABC, abstractmethod

from quoteflow.storage.exceptions import InvalidSessionIdError


def _normalized_session_id(session_id: str) -> str:
    try:
        return str(uuid.UUID(session_id))
    except (ValueError, AttributeError, TypeError) as exc:
        raise InvalidSessionIdError(f"Invalid session id '{session_id}'") from exc


def report_key(session_id: str) -> str:
    """Storage key for a session's report: '<session_id>.html'.

    Raises:
        InvalidSessionIdError: if session_id is not a UUID.
    """
    return f"{_normalized_session_id(session_id)}.html"


def failure_key(session_id: str) -> str:
    """Storage key for a session's processing failure: '<session_id>.error.txt'."""
    return f"{_normalized_session_id(session_id)}.error.txt"


class BaseReportStore(ABC):
    """Contract for durable storage of generated reports.

    A session ends with either a report or a failure message; saving one
    clears the other.
    """

    @abstractmethod
    def save(self, session_id: str, html: str) -> str:
        """Store (or overwrite) the report for a session.

        Returns:
            The storage key the report was written under.

        Raises:
            ReportStoreError: if the report cannot be persisted.
        """

    @abstractmethod
    def load(self, session_id: str) -> str:
        """Return the stored report.

        Raises:
            ReportNotFoundError: if nothing is stored for the session.
        """

    @abstractmethod
    def exists(self, session_id: str) -> bool:
        """Return True if a report is stored for the session."""

    @abstractmethod
    def save_failure(self, session_id: str, message: str) -> None:
        """Record that the processor failed for a session.

        Raises:
            ReportStoreError: if the failure cannot be persisted.
        """

    @abstractmethod
    def load_failure(self, session_id: str) -> str | None:
        """Return the recorded failure message, or None."""
