import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from quoteflow.completion.base import BaseCompletionResolver
from quoteflow.exceptions import DeadlineExceededError, ProcessingError, SubmissionError
from quoteflow.logging.logger import Log
from quoteflow.submission.models import Acknowledgment, Artifact, SubmissionSession

TRANSIENT_STATUS_CODES = frozenset({408, 429})
FAILED_STATUSES = frozenset({"failed", "error"})


class PollingResolver(BaseCompletionResolver):
    """Queries the status endpoint at a fixed interval until the report is ready.

    Transient problems (network errors, 5xx, malformed bodies) are logged and
    retried on the next tick. Only the elapsed-time ceiling, an explicit
    failure status or a non-retryable 4xx ends the loop early. Cancelling the
    surrounding task stops the loop between or during requests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        status_url: str,
        interval_seconds: float = 10,
        timeout_seconds: float = 600,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._http = http_client
        self._status_url = status_url
        self._interval_seconds = interval_seconds
        self._timeout_seconds = timeout_seconds
        self._clock = clock
        self._sleep = sleep

    async def resolve(
        self,
        session: SubmissionSession,
        outcome: Artifact | Acknowledgment,
    ) -> Artifact:
        if isinstance(outcome, Artifact):
            return outcome

        started = self._clock()
        attempt = 0
        while True:
            await self._sleep(self._interval_seconds)
            elapsed = self._clock() - started
            if elapsed >= self._timeout_seconds:
                Log.error(
                    f"Polling gave up after {elapsed:.0f}s",
                    session_id=session.session_id,
                )
                raise DeadlineExceededError("timed out")
            attempt += 1
            Log.debug(f"Polling status (attempt {attempt})", session_id=session.session_id)
            artifact = await self._poll_once(session)
            if artifact is not None:
                Log.info(
                    f"Report ready after {attempt} poll(s)",
                    session_id=session.session_id,
                )
                return artifact

    async def _poll_once(self, session: SubmissionSession) -> Artifact | None:
        """Run one status query. Returns None while the report is pending."""
        try:
            response = await self._http.get(
                self._status_url, params={"session_id": session.session_id}
            )
        except httpx.TransportError as exc:
            Log.warning(f"Status check failed, will retry: {exc}", session_id=session.session_id)
            return None

        if response.status_code >= 500 or response.status_code in TRANSIENT_STATUS_CODES:
            Log.warning(
                f"Status endpoint returned HTTP {response.status_code}, will retry",
                session_id=session.session_id,
            )
            return None
        if not response.is_success:
            raise SubmissionError(
                f"server error {response.status_code}",
                status_code=response.status_code,
            )

        if not _is_json(response):
            if not response.content:
                Log.warning("Status endpoint returned an empty body", session_id=session.session_id)
                return None
            return _artifact_from(response, session)

        try:
            payload = response.json()
        except ValueError:
            Log.warning("Malformed status response, will retry", session_id=session.session_id)
            return None
        if not isinstance(payload, dict):
            Log.warning("Unexpected status payload, will retry", session_id=session.session_id)
            return None
        return await self._interpret(payload, session)

    async def _interpret(
        self, payload: dict[str, Any], session: SubmissionSession
    ) -> Artifact | None:
        status = str(payload.get("status", "")).lower()
        if status in FAILED_STATUSES:
            detail = payload.get("error") or payload.get("message") or "processing failed"
            raise ProcessingError(str(detail))

        if payload.get("ready") is True:
            html = payload.get("html")
            if isinstance(html, str) and html:
                return Artifact(content=html.encode("utf-8"), session_id=session.session_id)
            url = payload.get("url")
            if isinstance(url, str) and url:
                return await self._download(url, session)
            Log.warning("Ready status without a report location", session_id=session.session_id)
        return None

    async def _download(self, url: str, session: SubmissionSession) -> Artifact | None:
        try:
            response = await self._http.get(url)
        except httpx.TransportError as exc:
            Log.warning(f"Report download failed, will retry: {exc}", session_id=session.session_id)
            return None
        if not response.is_success or not response.content:
            Log.warning(
                f"Report download returned HTTP {response.status_code}, will retry",
                session_id=session.session_id,
            )
            return None
        return _artifact_from(response, session)


def _is_json(response: httpx.Response) -> bool:
    return "json" in response.headers.get("content-type", "").lower()


def _artifact_from(response: httpx.Response, session: SubmissionSession) -> Artifact:
    return Artifact(
        content=response.content,
        content_type=response.headers.get("content-type", "text/html"),
        session_id=session.session_id,
    )
