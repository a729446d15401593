from quoteflow.completion.base import BaseCompletionResolver
from quoteflow.completion.callback import CallbackResolver
from quoteflow.completion.factory import ResolverFactory
from quoteflow.completion.mailbox import CompletionMailbox, completion_mailbox
from quoteflow.completion.polling import PollingResolver
from quoteflow.completion.synchronous import SynchronousResolver

__all__ = [
    "BaseCompletionResolver",
    "CallbackResolver",
    "CompletionMailbox",
    "PollingResolver",
    "ResolverFactory",
    "SynchronousResolver",
    "completion_mailbox",
]
