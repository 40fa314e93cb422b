"""Resilient PokeAPI Client — ExternalSource over httpx with retry, backoff, and error mapping.

Invariants:
    - 404: definitive not-found → None, never retried
    - Transient errors (timeout, connection, 5xx, other non-2xx): retried up to
      max_retries with exponential backoff, then ExternalUnavailableError
    - 2xx with a malformed body: ExternalUnavailableError("invalid_payload"), not retried
    - The key is sent as one escaped path segment: "?", "#", "/" never reach the URL raw
    - No caching here; all caching belongs to the retrieval pipeline

Design Decisions:
    - Wrapper over raw httpx.AsyncClient: isolates retry logic from the pipeline (ADR: single responsibility)
    - ±25% jitter on backoff: concurrent cold lookups don't retry in lockstep
    - httpx.AsyncClient injected and shared across lookups: tests use httpx.MockTransport
"""

import asyncio
import logging
import random
from urllib.parse import quote

import httpx

from app.core.domain_types import NaturalKey, Record
from app.core.errors import ErrorContext, ExternalUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_URL_TEMPLATE = "https://pokeapi.co/api/v2/pokemon/{name}"


class _TransientFailure(Exception):
    """Retryable upstream failure (internal to the retry loop)."""
    def __init__(self, message: str, reason: str, status_code: int | None = None):
        super().__init__(message)
        self.reason = reason
        self.status_code = status_code


class PokeApiClient:
    """Fetches {name, height, weight} for a normalized name."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        url_template: str = DEFAULT_URL_TEMPLATE,
        max_retries: int = 2,
        base_delay_ms: int = 200,
        max_delay_ms: int = 2000,
    ):
        self.client = client
        self.url_template = url_template
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def fetch(self, key: NaturalKey) -> Record | None:
        """Fetch a record. None means the source definitively has no such entity."""
        url = self.url_template.format(name=quote(key, safe=""))
        for attempt in range(self.max_retries + 1):
            try:
                return await self._get_once(url, key)
            except _TransientFailure as e:
                if attempt >= self.max_retries:
                    logger.error(
                        f"External source failed after {attempt + 1} attempts: {e}",
                        extra={
                            "record_key": key, "attempt": attempt + 1,
                            "status_code": e.status_code,
                        },
                    )
                    raise ExternalUnavailableError(
                        str(e), e.reason, e.status_code,
                        ErrorContext(record_key=key),
                    ) from e
                delay = self._backoff(attempt)
                logger.warning(
                    f"Transient external error, retry after {delay}ms: {e}",
                    extra={"record_key": key, "attempt": attempt + 1},
                )
                await asyncio.sleep(delay / 1000)
        raise AssertionError("unreachable")  # pragma: no cover

    async def _get_once(self, url: str, key: NaturalKey) -> Record | None:
        try:
            response = await self.client.get(url)
        except httpx.TimeoutException as e:
            raise _TransientFailure(f"timeout: {e}", "timeout") from e
        except httpx.TransportError as e:
            raise _TransientFailure(f"connection error: {e}", "connection_error") from e

        if response.status_code == httpx.codes.NOT_FOUND:
            logger.info(
                "External source reports not found",
                extra={"record_key": key, "status_code": 404},
            )
            return None
        if not response.is_success:
            raise _TransientFailure(
                f"upstream returned {response.status_code}",
                "upstream_status",
                response.status_code,
            )
        return _parse_payload(response, key)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    async def close(self) -> None:
        await self.client.aclose()


def _parse_payload(response: httpx.Response, key: NaturalKey) -> Record:
    """Map a 2xx body to a Record without id."""
    try:
        data = response.json()
    except ValueError as e:
        raise ExternalUnavailableError(
            "response body is not JSON", "invalid_payload",
            response.status_code, ErrorContext(record_key=key),
        ) from e
    if not isinstance(data, dict):
        raise ExternalUnavailableError(
            "response body is not an object", "invalid_payload",
            response.status_code, ErrorContext(record_key=key),
        )
    height, weight = data.get("height"), data.get("weight")
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in (height, weight)):
        raise ExternalUnavailableError(
            "height/weight missing or not integers", "invalid_payload",
            response.status_code, ErrorContext(record_key=key),
        )
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ExternalUnavailableError(
            "name missing or not a string", "invalid_payload",
            response.status_code, ErrorContext(record_key=key),
        )
    return Record(name=NaturalKey(name.strip().casefold()), height=height, weight=weight)
