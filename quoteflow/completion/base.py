from abc import ABC, abstractmethod

from quoteflow.submission.models import Acknowledgment, Artifact, SubmissionSession


class BaseCompletionResolver(ABC):
    """Contract for the strategies that detect when a report is ready."""

    def prepare(self, session: SubmissionSession) -> None:
        """Called right before the upload is sent. No-op by default."""

    def release(self, session: SubmissionSession) -> None:
        """Called on every exit from processing. Must be idempotent."""

    @abstractmethod
    async def resolve(
        self,
        session: SubmissionSession,
        outcome: Artifact | Acknowledgment,
    ) -> Artifact:
        """Wait for the session's report.

        Args:
            session: The live submission session.
            outcome: What the upload request returned.

        Returns:
            The generated report.

        Raises:
            QuoteFlowError: on timeout, fatal status or processor failure.
        """
