"""Shared plumbing for calls to the profile provider and the Gemini API."""

import asyncio
import logging

import httpx

from .errors import RateLimitError, UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    service: str,
    max_retries: int,
    backoff: float,
    **kwargs,
) -> httpx.Response:
    """Send a request, retrying only on HTTP 429 with a fixed backoff.

    Raises ``RateLimitError`` once ``max_retries`` retries are used up,
    ``UpstreamTimeoutError`` on timeouts and ``UpstreamError`` on transport
    failures.  Any other status is returned to the caller unchanged.
    """
    attempt = 0
    while True:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(
                f"{service} did not respond in time. Please try again."
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Could not reach {service}: {exc}") from exc

        if response.status_code != 429:
            return response

        if attempt >= max_retries:
            raise RateLimitError(
                f"{service} is rate limiting requests. Please try again later."
            )

        attempt += 1
        logger.warning(
            "%s rate limited the request (retry %d/%d in %.1fs)",
            service,
            attempt,
            max_retries,
            backoff,
        )
        await asyncio.sleep(backoff)


def raise_for_upstream_status(response: httpx.Response, service: str) -> None:
    """Turn a non-success response into ``UpstreamError`` with the API's own message."""
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        # Surface the upstream error message when the body carries one
        try:
            detail = exc.response.json()
            error = detail.get("error", {}) if isinstance(detail, dict) else {}
            msg = error.get("message", str(exc)) if isinstance(error, dict) else str(error)
        except ValueError:
            msg = str(exc)
        raise UpstreamError(f"{service} error ({exc.response.status_code}): {msg}") from exc
