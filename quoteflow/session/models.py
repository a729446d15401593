from enum import Enum


class Phase(str, Enum):
    """User-visible phases of one analysis session."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_active(self) -> bool:
        return self in (Phase.SUBMITTING, Phase.PROCESSING)


PROGRESS_STEPS: dict[Phase, str] = {
    Phase.SUBMITTING: "uploading",
    Phase.PROCESSING: "processing",
    Phase.COMPLETED: "completed",
}
