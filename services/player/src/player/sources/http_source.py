"""
HTTP content source for CallSync.

Fetches ``GET {base_url}/documents/{id}/content`` with :mod:`httpx` and
retries transport errors and 5xx responses with :mod:`tenacity`
exponential back-off. 4xx responses fail immediately.
"""

from __future__ import annotations

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from cs_common.exceptions import ContentFetchError

from .base import ContentSource

logger = structlog.get_logger()

_DEFAULT_MAX_ATTEMPTS = 3
_DEFAULT_TIMEOUT_S = 10.0


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


class HttpContentSource(ContentSource):
    """Fetch documents from a content service over HTTP.

    Args:
        base_url: Service root, e.g. ``http://content:8080``.
        max_attempts: Attempts per fetch (default 3).
        timeout: Per-request timeout in seconds (default 10).
        backoff: Exponential back-off multiplier in seconds; ``0``
            disables waiting between attempts.
        headers: Extra headers sent on every request.
        transport: Optional httpx transport (e.g. ``httpx.MockTransport``).
    """

    name: str = "http"

    def __init__(
        self,
        base_url: str,
        *,
        max_attempts: int = _DEFAULT_MAX_ATTEMPTS,
        timeout: float = _DEFAULT_TIMEOUT_S,
        backoff: float = 1.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.backoff = backoff
        self.headers = headers or {}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Return (and lazily create) the shared ``httpx.AsyncClient``."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
            )
        return self._client

    async def _get_with_retry(self, path: str) -> httpx.Response:
        @retry(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff, min=self.backoff, max=10),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        async def _inner() -> httpx.Response:
            client = await self._get_client()
            resp = await client.get(path)
            resp.raise_for_status()
            return resp

        return await _inner()

    async def _fetch(self, document_id: str) -> httpx.Response:
        log = logger.bind(base_url=self.base_url, document_id=document_id)
        try:
            resp = await self._get_with_retry(f"/documents/{document_id}/content")
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            log.warning("http_fetch_failed", status=status)
            raise ContentFetchError(document_id, f"HTTP {status}") from exc
        except httpx.TransportError as exc:
            log.warning("http_fetch_transport_error", error=str(exc))
            raise ContentFetchError(document_id, str(exc) or type(exc).__name__) from exc
        log.debug("http_fetch_ok", status=resp.status_code, size=len(resp.content))
        return resp

    async def fetch_transcript_text(self, document_id: str) -> str:
        resp = await self._fetch(document_id)
        return resp.text

    async def fetch_audio_bytes(self, document_id: str) -> bytes:
        resp = await self._fetch(document_id)
        return resp.content

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
