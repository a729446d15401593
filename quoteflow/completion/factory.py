import httpx

from quoteflow.completion.base import BaseCompletionResolver
from quoteflow.completion.callback import CallbackResolver
from quoteflow.completion.mailbox import CompletionMailbox, completion_mailbox
from quoteflow.completion.polling import PollingResolver
from quoteflow.completion.synchronous import SynchronousResolver
from quoteflow.config.settings import Settings
from quoteflow.submission.models import DeliveryMode


class ResolverFactory:
    """Creates the one completion strategy a deployment is configured for."""

    @classmethod
    def create(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient,
        mailbox: CompletionMailbox | None = None,
    ) -> BaseCompletionResolver:
        mode = cls.delivery_mode(settings)
        if mode is DeliveryMode.SYNCHRONOUS:
            return SynchronousResolver()
        if mode is DeliveryMode.POLLING:
            return PollingResolver(
                http_client,
                settings.status_url,
                interval_seconds=settings.poll_interval_seconds,
                timeout_seconds=settings.poll_timeout_seconds,
            )
        return CallbackResolver(
            mailbox if mailbox is not None else completion_mailbox,
            timeout_seconds=settings.poll_timeout_seconds,
        )

    @classmethod
    def delivery_mode(cls, settings: Settings) -> DeliveryMode:
        mode = str(settings.delivery_mode).lower()
        try:
            return DeliveryMode(mode)
        except ValueError:
            raise ValueError(
                f"Unknown delivery mode '{mode}'. "
                f"Choose from: {[m.value for m in DeliveryMode]}"
            ) from None
