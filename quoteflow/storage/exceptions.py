class ReportStoreError(Exception):
    """Base exception for report storage failures."""


class ReportNotFoundError(ReportStoreError):
    """Raised when no report is stored for a session."""


class InvalidSessionIdError(ReportStoreError):
    """Raised when a session id cannot be used as a storage key."""
