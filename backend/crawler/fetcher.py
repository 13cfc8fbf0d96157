import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

import httpx
from bs4 import UnicodeDammit

logger = logging.getLogger(__name__)

USER_AGENT = "llms-txt-generator/1.0 (+https://github.com/llms-txt-generator)"
FETCH_TIMEOUT = 10.0


class FailureKind(str, Enum):
    HTTP_ERROR = "http_error"
    WRONG_CONTENT_TYPE = "wrong_content_type"
    TIMEOUT = "timeout"
    REQUEST_FAILED = "request_failed"


@dataclass(frozen=True)
class FetchSuccess:
    html: str


@dataclass(frozen=True)
class FetchFailure:
    kind: FailureKind
    reason: str


FetchResult = FetchSuccess | FetchFailure

TIMED_OUT = FetchFailure(FailureKind.TIMEOUT, "Timed out")


def _header_charset(content_type: str) -> str | None:
    for param in content_type.split(";")[1:]:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip("\"'")
    return None


def decode_html(body: bytes, content_type: str) -> str:
    """Decode with the header charset, else the page's <meta charset>, else UTF-8."""
    charset = _header_charset(content_type)
    dammit = UnicodeDammit(
        body,
        [charset] if charset else [],
        is_html=True,
        user_encodings=["utf-8"],
    )
    if dammit.unicode_markup is None:
        return body.decode("utf-8", errors="replace")
    return dammit.unicode_markup


async def _get_html(client: httpx.AsyncClient, url: str) -> FetchResult:
    # streamed so a rejected response is closed before its body is read
    async with client.stream("GET", url, headers={"User-Agent": USER_AGENT}) as r:
        if not 200 <= r.status_code < 300:
            return FetchFailure(FailureKind.HTTP_ERROR, f"HTTP {r.status_code}")
        content_type = r.headers.get("Content-Type", "")
        if "text/html" not in content_type:
            mime = content_type.split(";", 1)[0].strip()
            return FetchFailure(FailureKind.WRONG_CONTENT_TYPE, f"Not HTML ({mime})")
        body = await r.aread()
    return FetchSuccess(html=decode_html(body, content_type))


async def fetch_html(
    url: str,
    timeout: float = FETCH_TIMEOUT,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    """GET url once and return its HTML, or the reason it was rejected.

    ``timeout`` is a hard deadline for the whole exchange, body included:
    when it passes the request is cancelled and its connection closed.
    """
    try:
        if client is not None:
            return await asyncio.wait_for(_get_html(client, url), timeout)
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            return await asyncio.wait_for(_get_html(client, url), timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException):
        logger.debug("Fetch timed out: %s", url)
        return TIMED_OUT
    except Exception:
        logger.debug("Fetch failed: %s", url, exc_info=True)
        return FetchFailure(FailureKind.REQUEST_FAILED, "Request failed")
