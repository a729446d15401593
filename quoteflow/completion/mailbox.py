import asyncio

from quoteflow.exceptions import ProcessingError
from quoteflow.logging.logger import Log
from quoteflow.submission.models import Artifact


class CompletionMailbox:
    """One-shot completion slots keyed by session id.

    Deliveries for a session nobody waits on, or for a session that already
    received its report, are discarded. All calls must happen on the event
    loop that owns the slots.
    """

    def __init__(self) -> None:
        self._slots: dict[str, asyncio.Future[Artifact]] = {}

    def subscribe(self, session_id: str) -> asyncio.Future[Artifact]:
        """Open (or return the already open) slot for ``session_id``."""
        slot = self._slots.get(session_id)
        if slot is None:
            slot = asyncio.get_running_loop().create_future()
            self._slots[session_id] = slot
            Log.debug("Completion slot opened", session_id=session_id)
        return slot

    def unsubscribe(self, session_id: str) -> None:
        slot = self._slots.pop(session_id, None)
        if slot is not None and not slot.done():
            slot.cancel()
            Log.debug("Completion slot closed", session_id=session_id)

    def deliver(self, session_id: str, artifact: Artifact) -> bool:
        """Hand a finished report to the session waiting for it.

        Returns:
            True if the report was accepted, False if it was stale or a
            duplicate.
        """
        if not self._claim(session_id):
            return False
        self._slots[session_id].set_result(artifact)
        Log.info(f"Report delivered ({artifact.size} bytes)", session_id=session_id)
        return True

    def fail(self, session_id: str, message: str) -> bool:
        """Report a processor failure to the waiting session."""
        if not self._claim(session_id):
            return False
        self._slots[session_id].set_exception(ProcessingError(message))
        Log.info(f"Processing failure delivered: {message}", session_id=session_id)
        return True

    def _claim(self, session_id: str) -> bool:
        slot = self._slots.get(session_id)
        if slot is None:
            Log.warning("Discarding delivery for unknown session", session_id=session_id)
            return False
        if slot.done():
            Log.warning("Discarding duplicate delivery", session_id=session_id)
            return False
        return True


completion_mailbox = CompletionMailbox()
