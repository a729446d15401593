import httpx
from starlette.datastructures import FormData, UploadFile

from quoteflow.logging.logger import Log
from quoteflow.relay.exceptions import RelayError, RelayTimeoutError


class ProcessorForwarder:
    """Re-sends an upload form, unchanged, to the processor webhook."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        webhook_url: str,
        timeout_seconds: float = 600,
    ) -> None:
        self._http = http_client
        self._webhook_url = webhook_url
        self._timeout_seconds = timeout_seconds

    async def forward(self, form: FormData) -> httpx.Response:
        """POST the form to the processor and return its raw response.

        Raises:
            RelayTimeoutError: if the processor does not answer in time.
            RelayError: if the processor cannot be reached.
        """
        data: dict[str, str] = {}
        files: list[tuple[str, tuple[str, bytes, str]]] = []
        for name, value in form.multi_items():
            if isinstance(value, UploadFile):
                content = await value.read()
                files.append(
                    (
                        name,
                        (
                            value.filename or name,
                            content,
                            value.content_type or "application/octet-stream",
                        ),
                    )
                )
            else:
                data[name] = value

        Log.info(
            f"Forwarding {len(files)} file(s) to processor",
            session_id=data.get("session_id"),
        )
        try:
            response = await self._http.post(
                self._webhook_url,
                data=data,
                files=files or None,
                timeout=self._timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise RelayTimeoutError("processor timed out") from exc
        except httpx.TransportError as exc:
            raise RelayError(f"could not reach processor: {exc}") from exc

        Log.info(
            f"Processor answered HTTP {response.status_code}",
            session_id=data.get("session_id"),
        )
        return response
