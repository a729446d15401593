import asyncio

from quoteflow.completion.base import BaseCompletionResolver
from quoteflow.completion.mailbox import CompletionMailbox
from quoteflow.exceptions import DeadlineExceededError
from quoteflow.logging.logger import Log
from quoteflow.submission.models import Acknowledgment, Artifact, SubmissionSession


class CallbackResolver(BaseCompletionResolver):
    """Waits for the relay to push the report into the mailbox.

    The slot is opened before the upload is sent, so a report that arrives
    ahead of the acknowledgment is held until ``resolve`` runs.
    """

    def __init__(self, mailbox: CompletionMailbox, timeout_seconds: float = 600) -> None:
        self._mailbox = mailbox
        self._timeout_seconds = timeout_seconds

    def prepare(self, session: SubmissionSession) -> None:
        self._mailbox.subscribe(session.session_id)

    def release(self, session: SubmissionSession) -> None:
        self._mailbox.unsubscribe(session.session_id)

    async def resolve(
        self,
        session: SubmissionSession,
        outcome: Artifact | Acknowledgment,
    ) -> Artifact:
        slot = self._mailbox.subscribe(session.session_id)
        Log.info("Waiting for completion callback", session_id=session.session_id)
        try:
            return await asyncio.wait_for(slot, timeout=self._timeout_seconds)
        except asyncio.TimeoutError as exc:
            Log.error("No completion callback before deadline", session_id=session.session_id)
            raise DeadlineExceededError("timed out") from exc
        finally:
            self.release(session)
