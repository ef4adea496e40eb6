"""
Transport Dispatcher

Issues exactly one HTTP request with a deadline using aiohttp and turns
transport failures into ``TimeoutError`` or ``NetworkError``. Status codes are
left to the classifier.
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from .exceptions import NetworkError, TimeoutError as RpcTimeoutError
from .models import RequestOptions, RpcRequest, DEFAULT_TIMEOUT_MS
from .utils import sanitize_headers

logger = logging.getLogger("rpc_fetch.transport")

# Statuses fetch() treats as redirects; following them is refused
REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


def build_request(
    method: str,
    url: Any,
    body: Optional[Any] = None,
    timeout_ms: Optional[int] = None,
    headers: Optional[Dict[str, str]] = None,
) -> RpcRequest:
    """Validate call arguments into an RpcRequest"""
    options = RequestOptions(
        timeout_ms=DEFAULT_TIMEOUT_MS if timeout_ms is None else timeout_ms,
        headers=headers or {},
    )
    return RpcRequest(method=method, url=url, body=body, options=options)


def encode_body(request: RpcRequest) -> tuple[Optional[bytes], Dict[str, str]]:
    """
    Serialize the body and compute outgoing headers.

    A JSON body gets ``content-type: application/json`` unless the caller
    set a content-type of their own, which wins. Binary bodies go out as-is
    with no content-type added.
    """
    if request.body is None:
        return None, dict(request.options.headers)

    if request.is_binary:
        return bytes(request.body), dict(request.options.headers)

    # NaN and Infinity are not JSON
    data = json.dumps(
        request.body, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    ).encode("utf-8")
    headers = {"content-type": "application/json"}
    for name, value in request.options.headers.items():
        if name.lower() == "content-type":
            headers.pop("content-type", None)
        headers[name] = value
    return data, headers


async def _send(session: aiohttp.ClientSession, request: RpcRequest) -> aiohttp.ClientResponse:
    data, headers = encode_body(request)

    logger.debug(
        "Sending %s %s headers=%s",
        request.method,
        request.url,
        sanitize_headers(headers),
        extra={"method": request.method, "url": request.url},
    )

    deadline = asyncio.timeout(request.options.timeout_ms / 1000)
    try:
        async with deadline:
            response = await session.request(
                request.method,
                request.url,
                data=data,
                headers=headers,
                allow_redirects=False,
                # binary bodies go out without a content-type
                skip_auto_headers=("Content-Type",),
            )
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
        # Which event fired first decides, not the exception type
        if deadline.expired():
            logger.warning(
                "Request timed out after %dms",
                request.options.timeout_ms,
                extra={"method": request.method, "url": request.url},
            )
            raise RpcTimeoutError() from e
        logger.warning(
            "Network error: %s",
            e,
            extra={"method": request.method, "url": request.url},
        )
        raise NetworkError() from e

    if response.status in REDIRECT_STATUSES:
        logger.warning(
            "Refusing to follow redirect to %s",
            response.headers.get("location"),
            extra={"method": request.method, "url": request.url, "status": response.status},
        )
        response.release()
        raise NetworkError()

    return response


@asynccontextmanager
async def dispatch(
    method: str,
    url: Any,
    body: Optional[Any] = None,
    timeout_ms: Optional[int] = None,
    headers: Optional[Dict[str, str]] = None,
) -> AsyncIterator[aiohttp.ClientResponse]:
    """
    Perform one HTTP exchange and yield the raw response.

    The deadline covers the exchange up to the response head. The body is
    read lazily by whoever consumes the response, inside this context; the
    response and its session are released on every exit path.

    Args:
        method: HTTP method
        url: Target URL
        body: JSON-serializable value, or bytes for an opaque payload
        timeout_ms: Deadline in milliseconds (default: 5000)
        headers: Extra request headers

    Yields:
        aiohttp.ClientResponse: Response with unread body

    Raises:
        TimeoutError: If the deadline elapsed first
        NetworkError: If the transport failed or the server redirected
        pydantic.ValidationError: If the arguments are invalid
        ValueError: If a JSON body holds NaN or Infinity
    """
    request = build_request(method, url, body, timeout_ms, headers)

    # One session per call: no pooling, no cookies
    async with aiohttp.ClientSession(
        cookie_jar=aiohttp.DummyCookieJar(),
        timeout=aiohttp.ClientTimeout(total=None),
    ) as session:
        response = await _send(session, request)
        try:
            yield response
        finally:
            response.release()
