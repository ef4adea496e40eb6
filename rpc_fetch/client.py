"""
rpc_fetch Client

``do_rpc`` performs one JSON-over-HTTP exchange and returns the decoded JSON
object or raises one RpcError. ``RpcClient`` adds a base URL, default headers
and a default timeout on top; it keeps no state between calls.
"""

import logging
import time
from typing import Any, Dict, Optional

from .classifier import classify
from .exceptions import ConfigurationError, RpcError
from .metrics import metrics_request
from .models import ClientConfig, normalize_method
from .transport import dispatch
from .utils import setup_logging

logger = logging.getLogger("rpc_fetch.client")


async def do_rpc(
    method: str,
    url: Any,
    body: Optional[Any] = None,
    *,
    timeout_ms: Optional[int] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Perform one RPC call.

    Args:
        method: HTTP method; DELETE, GET, HEAD, OPTIONS, POST and PUT are
            upper-cased, any other verb is sent exactly as written
        url: Target URL
        body: Optional JSON-serializable value, or bytes sent as-is
        timeout_ms: Deadline in milliseconds (default: 5000)
        headers: Extra request headers

    Returns:
        Dict[str, Any]: Response JSON object ({} for an empty 2xx)

    Raises:
        TimeoutError: Deadline elapsed
        NetworkError: Transport failure, redirect, or unreadable 2xx body
        ServerError: Error status or malformed server response
        UserError: Error status with a user_error_message
    """
    start = time.monotonic()
    method = normalize_method(method)
    try:
        async with dispatch(method, url, body, timeout_ms=timeout_ms, headers=headers) as response:
            result = await classify(response)
    except RpcError as e:
        metrics_request(method, e.kind.value, time.monotonic() - start)
        logger.debug("%s %s failed: %r", method, url, e, extra={"method": method, "url": str(url)})
        raise

    metrics_request(method, "ok", time.monotonic() - start)
    return result


class RpcClient:
    """
    Convenience client for one JSON API.

    Example:
        >>> client = RpcClient(ClientConfig(base_url="https://api.example.com"))
        >>> user = await client.get("/v1/users/me")
        >>> await client.post("/v1/notes", {"text": "hello"}, timeout_ms=10000)
    """

    def __init__(self, config: Optional[ClientConfig] = None):
        """
        Initialize client

        Args:
            config: Client configuration (default: ClientConfig.from_env())
        """
        self.config = config if config is not None else ClientConfig.from_env()

        if self.config.debug:
            setup_logging(debug=True)

        self.base_url = self.config.base_url.rstrip("/")

    def _url(self, path: str) -> str:
        """Build full URL from path"""
        if path.startswith(("http://", "https://")):
            return path
        if not self.base_url:
            raise ConfigurationError(f"relative path {path!r} needs a base_url")
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        *,
        timeout_ms: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Perform one call with the configured defaults; per-call headers win"""
        merged = dict(self.config.headers)
        if headers:
            merged.update(headers)
        return await do_rpc(
            method,
            self._url(path),
            body,
            timeout_ms=timeout_ms if timeout_ms is not None else self.config.timeout_ms,
            headers=merged,
        )

    async def get(self, path: str, **kwargs) -> Dict[str, Any]:
        return await self.request("GET", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Dict[str, Any]:
        return await self.request("DELETE", path, **kwargs)

    async def post(self, path: str, body: Optional[Any] = None, **kwargs) -> Dict[str, Any]:
        return await self.request("POST", path, body, **kwargs)

    async def put(self, path: str, body: Optional[Any] = None, **kwargs) -> Dict[str, Any]:
        return await self.request("PUT", path, body, **kwargs)

    async def patch(self, path: str, body: Optional[Any] = None, **kwargs) -> Dict[str, Any]:
        return await self.request("PATCH", path, body, **kwargs)
