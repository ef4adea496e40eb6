"""
Synchronous wrapper for rpc_fetch

For scripts and code without an event loop. Each call runs one ``do_rpc``
on a fresh event loop, so it must not be called from inside a running loop.
"""

import asyncio
from typing import Any, Dict, Optional

from .client import do_rpc


def do_rpc_sync(
    method: str,
    url: Any,
    body: Optional[Any] = None,
    *,
    timeout_ms: Optional[int] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Blocking version of :func:`rpc_fetch.do_rpc`.

    Raises:
        RuntimeError: If called while an event loop is running in this thread
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(do_rpc(method, url, body, timeout_ms=timeout_ms, headers=headers))
    raise RuntimeError("do_rpc_sync cannot run inside an event loop; await do_rpc instead")
