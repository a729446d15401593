"""
Relay service between the upload page and the external quote processor.

Forwards uploads to the processor webhook, keeps finished reports (or the
processor failure) in the report store and answers status lookups for
polling clients.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from quoteflow.completion.mailbox import CompletionMailbox, completion_mailbox
from quoteflow.config.settings import Settings
from quoteflow.logging.logger import Log
from quoteflow.relay.exceptions import RelayError, RelayTimeoutError
from quoteflow.relay.forwarder import ProcessorForwarder
from quoteflow.relay.models import (
    ErrorResponse,
    FailedStatus,
    PendingStatus,
    SaveAnalysisRequest,
    SaveAnalysisResponse,
    UploadAcknowledgment,
)
from quoteflow.storage.base import BaseReportStore
from quoteflow.storage.exceptions import (
    InvalidSessionIdError,
    ReportNotFoundError,
    ReportStoreError,
)
from quoteflow.storage.factory import ReportStoreFactory
from quoteflow.submission.models import Artifact, DeliveryMode


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def _cors_origins(raw: str) -> list[str]:
    if raw.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app(
    settings: Settings,
    store: BaseReportStore | None = None,
    http_client: httpx.AsyncClient | None = None,
    mailbox: CompletionMailbox | None = None,
) -> FastAPI:
    """Build the relay application.

    Collaborators default to the ones described by ``settings``; tests pass
    their own.
    """
    report_store = store if store is not None else ReportStoreFactory.create(settings)
    owns_client = http_client is None
    client = http_client if http_client is not None else httpx.AsyncClient()
    notifier = mailbox if mailbox is not None else completion_mailbox
    mode = DeliveryMode(settings.delivery_mode)
    forwarder = ProcessorForwarder(
        client,
        settings.processor_webhook_url,
        timeout_seconds=settings.processor_timeout_seconds,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        Log.info(f"Relay started in {mode.value} mode")
        try:
            yield
        finally:
            if owns_client:
                await client.aclose()

    app = FastAPI(title="quoteflow relay", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(settings.cors_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    def report_url(session_id: str) -> str:
        return f"{settings.public_base_url.rstrip('/')}/reports/{session_id}"

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "service": "quoteflow-relay"}

    @app.post("/upload")
    async def upload(request: Request) -> Response:
        """Forward an upload to the processor."""
        form = await request.form()
        session_id = form.get("session_id")
        session_id = session_id if isinstance(session_id, str) else None
        try:
            response = await forwarder.forward(form)
        except RelayTimeoutError as exc:
            Log.error(f"Relay forward timed out: {exc}", session_id=session_id)
            return _error(504, str(exc))
        except RelayError as exc:
            Log.error(f"Relay forward failed: {exc}", session_id=session_id)
            return _error(502, str(exc))

        if mode is DeliveryMode.SYNCHRONOUS:
            return Response(
                content=response.content,
                status_code=response.status_code,
                media_type=response.headers.get("content-type", "text/html"),
            )

        if not response.is_success:
            return _error(502, f"processor returned HTTP {response.status_code}")
        file_count = form.get("file_count")
        ack = UploadAcknowledgment(
            session_id=session_id,
            file_count=int(file_count) if isinstance(file_count, str) and file_count.isdigit() else 0,
        )
        return JSONResponse(content=ack.model_dump())

    @app.post("/save-analysis")
    async def save_analysis(body: SaveAnalysisRequest) -> Response:
        """Persist a finished report, or a processor failure, and notify a waiting client.

        Store calls run in the thread pool; the mailbox is only touched from
        the event loop.
        """
        if not body.session_id or not (body.html or body.error):
            return _error(400, "session_id and html (or error) are required")
        try:
            if body.html:
                await run_in_threadpool(report_store.save, body.session_id, body.html)
            else:
                await run_in_threadpool(report_store.save_failure, body.session_id, body.error)
        except InvalidSessionIdError as exc:
            return _error(400, str(exc))
        except ReportStoreError as exc:
            Log.error(f"Could not save analysis: {exc}", session_id=body.session_id)
            return _error(500, str(exc))

        if not body.html:
            delivered = notifier.fail(body.session_id, body.error)
            Log.info("Analysis failure saved", session_id=body.session_id, delivered=delivered)
            return JSONResponse(
                content=SaveAnalysisResponse(
                    session_id=body.session_id,
                    delivered=delivered,
                ).model_dump()
            )

        delivered = notifier.deliver(
            body.session_id,
            Artifact(
                content=body.html.encode("utf-8"),
                content_type="text/html",
                session_id=body.session_id,
            ),
        )
        Log.info("Analysis saved", session_id=body.session_id, delivered=delivered)
        return JSONResponse(
            content=SaveAnalysisResponse(
                session_id=body.session_id,
                url=report_url(body.session_id),
                delivered=delivered,
            ).model_dump()
        )

    @app.get("/check-analysis")
    async def check_analysis(session_id: str | None = None) -> Response:
        """Return the report when ready, the failure if processing failed,
        otherwise a pending status."""
        if not session_id:
            return _error(400, "session_id is required")
        try:
            if await run_in_threadpool(report_store.exists, session_id):
                html = await run_in_threadpool(report_store.load, session_id)
                return HTMLResponse(content=html)
            failure = await run_in_threadpool(report_store.load_failure, session_id)
        except InvalidSessionIdError as exc:
            return _error(400, str(exc))
        except ReportNotFoundError:
            return JSONResponse(content=PendingStatus().model_dump())
        if failure is not None:
            return JSONResponse(content=FailedStatus(error=failure).model_dump())
        return JSONResponse(content=PendingStatus().model_dump())

    @app.get("/reports/{session_id}")
    async def download_report(session_id: str) -> Response:
        try:
            html = await run_in_threadpool(report_store.load, session_id)
        except InvalidSessionIdError as exc:
            return _error(400, str(exc))
        except ReportNotFoundError:
            return _error(404, "report not found")
        return HTMLResponse(
            content=html,
            headers={"Content-Disposition": f'attachment; filename="relatorio-{session_id}.html"'},
        )

    return app
