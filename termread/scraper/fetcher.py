"""HTTP fetcher: sync for pipe/export mode, async for the interactive reader."""

from __future__ import annotations

import logging

import httpx

from termread.config import settings
from termread.scraper.models import RawPage

logger = logging.getLogger(__name__)

_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


def _headers() -> dict[str, str]:
    return {"User-Agent": settings.user_agent, "Accept": _ACCEPT}


def normalize_url(text: str) -> str:
    """Trim *text* and prefix ``https://`` when it carries no http(s) scheme."""
    url = text.strip()
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    return url


def _to_raw_page(response: httpx.Response) -> RawPage:
    response.raise_for_status()
    logger.info("Fetched %s (HTTP %d, %d bytes)", response.url, response.status_code, len(response.content))
    return RawPage(url=str(response.url), html=response.text, status_code=response.status_code)


def fetch_url(url: str) -> RawPage:
    """Fetch *url* and return a :class:`RawPage`.

    Raises:
        httpx.HTTPStatusError: If the server returns a 4xx/5xx status code.
        httpx.HTTPError: On transport failures (DNS, timeout, ...).
    """
    with httpx.Client(
        headers=_headers(),
        timeout=settings.request_timeout,
        follow_redirects=True,
    ) as client:
        return _to_raw_page(client.get(url))


async def fetch_url_async(url: str) -> RawPage:
    """Async twin of :func:`fetch_url`, used by the interactive reader's load task."""
    async with httpx.AsyncClient(
        headers=_headers(),
        timeout=settings.request_timeout,
        follow_redirects=True,
    ) as client:
        return _to_raw_page(await client.get(url))


def describe_fetch_error(exc: Exception) -> str:
    """One-line, user-facing description of a fetch failure."""
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        return f"HTTP {response.status_code} {response.reason_phrase} for {exc.request.url}".strip()
    if isinstance(exc, httpx.TimeoutException):
        return "request timed out"
    if isinstance(exc, httpx.RequestError):
        return f"could not connect: {exc}" if str(exc) else "could not connect"
    return str(exc) or type(exc).__name__
