import asyncio
import uuid
from datetime import datetime, timezone

import httpx

from quoteflow.exceptions import (
    DeadlineExceededError,
    IntakeValidationError,
    ProcessingError,
    SubmissionError,
)
from quoteflow.intake.models import CandidateFile
from quoteflow.logging.logger import Log
from quoteflow.submission.models import Acknowledgment, Artifact, SubmissionSession

DEFAULT_CONTENT_TYPE = "text/html"


class SubmissionClient:
    """Packages accepted files into one multipart upload request."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        upload_url: str,
        timeout_seconds: float = 600,
    ) -> None:
        self._http = http_client
        self._upload_url = upload_url
        self._timeout_seconds = timeout_seconds

    def open_session(self, files: tuple[CandidateFile, ...]) -> SubmissionSession:
        """Create a fresh session for the files about to be sent.

        Raises:
            IntakeValidationError: if no file is selected.
        """
        if not files:
            raise IntakeValidationError("select at least one file")
        return SubmissionSession(
            session_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            files=tuple(files),
        )

    async def send(
        self, session: SubmissionSession, expect_artifact: bool
    ) -> Artifact | Acknowledgment:
        """POST the session to the upload endpoint.

        Returns the report when ``expect_artifact`` is set (synchronous
        deployments), otherwise the processor's acknowledgment.

        Raises:
            DeadlineExceededError: if no response arrives within the ceiling.
            SubmissionError: on transport failure or non-2xx status.
            ProcessingError: if the response is empty or reports failure.
        """
        Log.info(
            f"Submitting {session.file_count} file(s)",
            session_id=session.session_id,
        )
        try:
            response = await asyncio.wait_for(
                self._post(session), timeout=self._timeout_seconds
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            Log.error("Upload timed out", session_id=session.session_id)
            raise DeadlineExceededError("timed out") from exc
        except httpx.TransportError as exc:
            Log.error(f"Upload transport error: {exc}", session_id=session.session_id)
            raise SubmissionError("could not reach server") from exc

        if not response.is_success:
            Log.error(
                f"Upload rejected with HTTP {response.status_code}",
                session_id=session.session_id,
            )
            raise SubmissionError(
                f"server error {response.status_code}",
                status_code=response.status_code,
            )

        if expect_artifact:
            return self._artifact_from(response, session)
        return self._acknowledgment_from(response, session)

    async def _post(self, session: SubmissionSession) -> httpx.Response:
        files = [
            (f"file_{index}", (f.name, f.content, f.media_type))
            for index, f in enumerate(session.files)
        ]
        return await self._http.post(
            self._upload_url,
            data=session.form_fields(),
            files=files,
            timeout=self._timeout_seconds,
        )

    def _artifact_from(
        self, response: httpx.Response, session: SubmissionSession
    ) -> Artifact:
        if not response.content:
            raise ProcessingError("empty report")
        return Artifact(
            content=response.content,
            content_type=response.headers.get("content-type", DEFAULT_CONTENT_TYPE),
            session_id=session.session_id,
        )

    def _acknowledgment_from(
        self, response: httpx.Response, session: SubmissionSession
    ) -> Acknowledgment:
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProcessingError("invalid acknowledgment") from exc
        if not isinstance(payload, dict):
            raise ProcessingError("invalid acknowledgment")
        if payload.get("success") is False:
            detail = payload.get("error") or "processing could not be started"
            raise ProcessingError(str(detail))
        Log.info("Upload acknowledged", session_id=session.session_id)
        return Acknowledgment(session_id=session.session_id, payload=payload)
