import asyncio
from collections.abc import Callable, Iterable

import httpx

from quoteflow.completion.base import BaseCompletionResolver
from quoteflow.completion.factory import ResolverFactory
from quoteflow.completion.mailbox import CompletionMailbox
from quoteflow.config.settings import Settings
from quoteflow.exceptions import InvalidTransitionError, QuoteFlowError
from quoteflow.intake.models import CandidateFile
from quoteflow.intake.validator import IntakeValidator, quote_count_label
from quoteflow.logging.logger import Log
from quoteflow.session.models import PROGRESS_STEPS, Phase
from quoteflow.submission.client import SubmissionClient
from quoteflow.submission.models import Artifact, DeliveryMode, SubmissionSession

PhaseListener = Callable[[Phase, Phase], None]


class AnalysisSession:
    """Drives one user's upload from file intake to a downloadable report.

    Phases: idle -> submitting -> processing -> completed | error, and back
    to idle only through reset(). One submission is live at a time; it runs
    as its own asyncio task so that reset() can cancel it.
    """

    def __init__(
        self,
        validator: IntakeValidator,
        client: SubmissionClient,
        resolver: BaseCompletionResolver,
        mode: DeliveryMode,
    ) -> None:
        self._validator = validator
        self._client = client
        self._resolver = resolver
        self._mode = mode
        self._phase = Phase.IDLE
        self._files: tuple[CandidateFile, ...] = ()
        self._session: SubmissionSession | None = None
        self._artifact: Artifact | None = None
        self._error_message: str | None = None
        self._task: asyncio.Task[Phase] | None = None
        self._listeners: list[PhaseListener] = []

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def files(self) -> tuple[CandidateFile, ...]:
        return self._files

    @property
    def session(self) -> SubmissionSession | None:
        return self._session

    @property
    def artifact(self) -> Artifact | None:
        return self._artifact

    @property
    def error_message(self) -> str | None:
        return self._error_message

    @property
    def can_submit(self) -> bool:
        return self._phase is Phase.IDLE and bool(self._files) and not self._task_pending()

    @property
    def file_count_label(self) -> str:
        return quote_count_label(len(self._files))

    @property
    def submit_label(self) -> str:
        return f"Enviar {self.file_count_label}"

    @property
    def progress_step(self) -> str | None:
        return PROGRESS_STEPS.get(self._phase)

    def on_phase_change(self, listener: PhaseListener) -> None:
        self._listeners.append(listener)

    # Intake

    def add_files(self, incoming: Iterable[CandidateFile]) -> list[str]:
        """Validate and add files. Returns the rejection messages."""
        self._require_idle("add files")
        result = self._validator.accept(incoming, self._files)
        self._files = result.accepted
        return result.rejections

    def remove_file(self, index: int) -> None:
        self._require_idle("remove files")
        self._files = self._validator.remove(self._files, index)

    def clear_files(self) -> None:
        self._require_idle("clear files")
        self._files = ()

    # Submission

    def start(self) -> "asyncio.Task[Phase]":
        """Begin a submission in the background and return its task.

        Raises:
            InvalidTransitionError: if a submission is live or the previous
                one has not been reset yet.
        """
        self._require_idle("submit")
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def submit(self) -> Phase:
        """Run a submission to its end and return the resulting phase."""
        task = self.start()
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        return self._phase

    def reset(self) -> None:
        """Return to idle from any phase, stopping in-flight work."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        if self._session is not None:
            self._resolver.release(self._session)
            Log.info("Session discarded", session_id=self._session.session_id)
        self._session = None
        self._artifact = None
        self._error_message = None
        self._files = ()
        self._transition(Phase.IDLE)

    async def _run(self) -> Phase:
        session: SubmissionSession | None = None
        try:
            session = self._client.open_session(self._files)
            self._session = session
            self._transition(Phase.SUBMITTING)
            self._resolver.prepare(session)
            outcome = await self._client.send(session, self._mode.expects_artifact)
            self._transition(Phase.PROCESSING)
            artifact = await self._resolver.resolve(session, outcome)
        except QuoteFlowError as exc:
            self._fail(str(exc))
        except asyncio.CancelledError:
            if self._owns_current_task() and self._phase.is_active:
                self._session = None
                self._transition(Phase.IDLE)
            raise
        except Exception as exc:
            Log.exception(f"Unexpected error during submission: {exc}")
            self._fail("unexpected error")
        else:
            self._artifact = artifact
            self._transition(Phase.COMPLETED)
        finally:
            if session is not None:
                self._resolver.release(session)
        return self._phase

    def _fail(self, message: str) -> None:
        self._error_message = message
        session_id = self._session.session_id if self._session else None
        Log.error(f"Submission failed: {message}", session_id=session_id)
        self._transition(Phase.ERROR)

    def _transition(self, new: Phase) -> None:
        old = self._phase
        if old is new:
            return
        self._phase = new
        Log.info(f"Phase {old.value} -> {new.value}")
        for listener in self._listeners:
            try:
                listener(old, new)
            except Exception as exc:
                Log.exception(f"Phase listener failed on {old.value} -> {new.value}: {exc}")

    def _require_idle(self, action: str) -> None:
        if self._phase is not Phase.IDLE or self._task_pending():
            raise InvalidTransitionError(
                f"Cannot {action} while {self._phase.value}; reset first"
            )

    def _task_pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def _owns_current_task(self) -> bool:
        return self._task is not None and self._task is asyncio.current_task()


def build_session(
    settings: Settings,
    http_client: httpx.AsyncClient,
    mailbox: CompletionMailbox | None = None,
) -> AnalysisSession:
    """Build an AnalysisSession wired for the configured delivery mode."""
    mode = ResolverFactory.delivery_mode(settings)
    return AnalysisSession(
        validator=IntakeValidator.from_settings(settings),
        client=SubmissionClient(
            http_client,
            settings.upload_url,
            timeout_seconds=settings.submit_timeout_seconds,
        ),
        resolver=ResolverFactory.create(settings, http_client, mailbox),
        mode=mode,
    )
