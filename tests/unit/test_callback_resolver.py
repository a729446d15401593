import asyncio
from datetime import datetime, timezone

import pytest

from quoteflow.completion.callback import CallbackResolver
from quoteflow.completion.mailbox import CompletionMailbox
from quoteflow.exceptions import DeadlineExceededError, ProcessingError
from quoteflow.intake.models import CandidateFile
from quoteflow.submission.models import Acknowledgment, Artifact, SubmissionSession

SESSION_A = "7a1c3e55-2f0b-4c8e-9a6d-0b1e2c3d4f5a"
SESSION_B = "c2d4e6f8-1a3b-4c5d-8e7f-9a0b1c2d3e4f"


def _session(session_id: str = SESSION_A) -> SubmissionSession:
    return SubmissionSession(
        session_id=session_id,
        timestamp=datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc),
        files=(CandidateFile(name="a.pdf", size=10, media_type="application/pdf"),),
    )


def _artifact(session_id: str = SESSION_A, body: bytes = b"<html>report</html>") -> Artifact:
    return Artifact(content=body, session_id=session_id)


class TestMailbox:
    def test_deliver_to_unknown_session_is_discarded(self) -> None:
        mailbox = CompletionMailbox()

        assert mailbox.deliver(SESSION_A, _artifact()) is False

    def test_deliver_resolves_subscribed_slot(self) -> None:
        async def run() -> Artifact:
            mailbox = CompletionMailbox()
            slot = mailbox.subscribe(SESSION_A)
            assert mailbox.deliver(SESSION_A, _artifact()) is True
            return await slot

        assert asyncio.run(run()).text == "<html>report</html>"

    def test_duplicate_delivery_is_ignored(self) -> None:
        async def run() -> Artifact:
            mailbox = CompletionMailbox()
            slot = mailbox.subscribe(SESSION_A)
            mailbox.deliver(SESSION_A, _artifact(body=b"first"))
            assert mailbox.deliver(SESSION_A, _artifact(body=b"second")) is False
            return await slot

        assert asyncio.run(run()).content == b"first"

    def test_delivery_for_other_session_does_not_leak(self) -> None:
        async def run() -> bool:
            mailbox = CompletionMailbox()
            slot = mailbox.subscribe(SESSION_B)
            accepted = mailbox.deliver(SESSION_A, _artifact(SESSION_A))
            assert not slot.done()
            return accepted

        assert asyncio.run(run()) is False

    def test_unsubscribe_cancels_and_forgets_slot(self) -> None:
        async def run() -> None:
            mailbox = CompletionMailbox()
            slot = mailbox.subscribe(SESSION_A)
            mailbox.unsubscribe(SESSION_A)
            assert slot.cancelled()
            assert mailbox.deliver(SESSION_A, _artifact()) is False

        asyncio.run(run())

    def test_subscribe_twice_returns_same_slot(self) -> None:
        async def run() -> None:
            mailbox = CompletionMailbox()
            assert mailbox.subscribe(SESSION_A) is mailbox.subscribe(SESSION_A)

        asyncio.run(run())

    def test_fail_delivers_processing_error(self) -> None:
        async def run() -> None:
            mailbox = CompletionMailbox()
            slot = mailbox.subscribe(SESSION_A)
            assert mailbox.fail(SESSION_A, "processor crashed") is True
            with pytest.raises(ProcessingError, match="processor crashed"):
                await slot

        asyncio.run(run())


class TestCallbackResolver:
    def test_returns_delivered_artifact_and_unsubscribes(self) -> None:
        async def run() -> tuple[Artifact, CompletionMailbox]:
            mailbox = CompletionMailbox()
            resolver = CallbackResolver(mailbox, timeout_seconds=5)
            session = _session()
            resolver.prepare(session)
            task = asyncio.create_task(
                resolver.resolve(session, Acknowledgment(session_id=SESSION_A))
            )
            await asyncio.sleep(0)
            mailbox.deliver(SESSION_A, _artifact())
            return await task, mailbox

        artifact, mailbox = asyncio.run(run())

        assert artifact.text == "<html>report</html>"
        assert mailbox.deliver(SESSION_A, _artifact(body=b"late")) is False

    def test_delivery_before_resolve_is_kept(self) -> None:
        async def run() -> Artifact:
            mailbox = CompletionMailbox()
            resolver = CallbackResolver(mailbox, timeout_seconds=5)
            session = _session()
            resolver.prepare(session)
            mailbox.deliver(SESSION_A, _artifact())
            return await resolver.resolve(session, Acknowledgment(session_id=SESSION_A))

        assert asyncio.run(run()).text == "<html>report</html>"

    def test_times_out_without_delivery(self) -> None:
        async def run() -> CompletionMailbox:
            mailbox = CompletionMailbox()
            resolver = CallbackResolver(mailbox, timeout_seconds=0.01)
            with pytest.raises(DeadlineExceededError, match="timed out"):
                await resolver.resolve(_session(), Acknowledgment(session_id=SESSION_A))
            return mailbox

        mailbox = asyncio.run(run())

        assert mailbox.deliver(SESSION_A, _artifact()) is False

    def test_cancellation_releases_slot(self) -> None:
        async def run() -> CompletionMailbox:
            mailbox = CompletionMailbox()
            resolver = CallbackResolver(mailbox, timeout_seconds=5)
            task = asyncio.create_task(
                resolver.resolve(_session(), Acknowledgment(session_id=SESSION_A))
            )
            await asyncio.sleep(0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            return mailbox

        mailbox = asyncio.run(run())

        assert mailbox.deliver(SESSION_A, _artifact(body=b"late")) is False
