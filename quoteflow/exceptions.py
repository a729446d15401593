class QuoteFlowError(Exception):
    """Base exception for all errors surfaced to the analysis session."""


class IntakeValidationError(QuoteFlowError):
    """Raised when the selected files cannot be submitted."""


class SubmissionError(QuoteFlowError):
    """Raised when the upload request fails at the transport or HTTP level."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DeadlineExceededError(QuoteFlowError):
    """Raised when a send or poll ceiling is exceeded.

    The report may still be produced server-side.
    """


class ProcessingError(QuoteFlowError):
    """Raised when the external processor reports a failure."""


class InvalidTransitionError(QuoteFlowError):
    """Raised when an operation is not allowed in the current phase."""
