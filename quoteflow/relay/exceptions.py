class RelayError(Exception):
    """Raised when the relay cannot reach the external processor."""


class RelayTimeoutError(RelayError):
    """Raised when the processor does not answer within the relay timeout."""
