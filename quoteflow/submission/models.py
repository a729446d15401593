from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from quoteflow.intake.models import CandidateFile


class DeliveryMode(str, Enum):
    """How the report reaches the client after upload."""

    SYNCHRONOUS = "synchronous"
    POLLING = "polling"
    CALLBACK = "callback"

    @property
    def expects_artifact(self) -> bool:
        """True when the upload response body is the report itself."""
        return self is DeliveryMode.SYNCHRONOUS


@dataclass(frozen=True)
class SubmissionSession:
    """One upload attempt, identified by a client-generated session id."""

    session_id: str
    timestamp: datetime
    files: tuple[CandidateFile, ...]

    @property
    def file_count(self) -> int:
        return len(self.files)

    def form_fields(self) -> dict[str, str]:
        return {
            "session_id": self.session_id,
            "timestamp": self.timestamp.isoformat(),
            "file_count": str(self.file_count),
        }


@dataclass(frozen=True)
class Artifact:
    """The generated report, kept as opaque bytes with its content type."""

    content: bytes = field(repr=False)
    content_type: str = "text/html"
    session_id: str | None = None

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def suggested_filename(self) -> str:
        if self.session_id:
            return f"relatorio-{self.session_id}.html"
        return "relatorio.html"


@dataclass(frozen=True)
class Acknowledgment:
    """Upload accepted; the report will be produced out of band."""

    session_id: str
    payload: dict[str, object] = field(default_factory=dict)
