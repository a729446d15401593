from quoteflow.completion.base import BaseCompletionResolver
from quoteflow.exceptions import ProcessingError
from quoteflow.submission.models import Acknowledgment, Artifact, SubmissionSession


class SynchronousResolver(BaseCompletionResolver):
    """The upload response already is the report."""

    async def resolve(
        self,
        session: SubmissionSession,
        outcome: Artifact | Acknowledgment,
    ) -> Artifact:
        if not isinstance(outcome, Artifact):
            raise ProcessingError("upload response did not contain a report")
        return outcome
