"""
rpc_fetch Utilities
"""

import logging
from typing import Mapping, Dict

SENSITIVE_HEADER_PARTS = ("authorization", "cookie", "token", "key", "secret")


def setup_logging(debug: bool = False) -> None:
    """
    Show rpc_fetch call events on stderr when the host has not configured logging.

    Used by RpcClient when ``ClientConfig.debug`` is set. Only the
    ``rpc_fetch`` logger level changes; an existing root setup is left alone.
    """
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("rpc_fetch").setLevel(logging.DEBUG if debug else logging.INFO)


def sanitize_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """
    Redact header values that may carry credentials

    Example:
        >>> sanitize_headers({"Authorization": "Bearer abc", "Accept": "*/*"})
        {'Authorization': '***REDACTED***', 'Accept': '*/*'}
    """
    sanitized = {}
    for name, value in headers.items():
        if any(part in name.lower() for part in SENSITIVE_HEADER_PARTS):
            sanitized[name] = "***REDACTED***"
        else:
            sanitized[name] = value
    return sanitized


def parse_content_length(value) -> int:
    """Lenient content-length parse; anything unusable counts as zero"""
    if value is None:
        return 0
    try:
        return int(str(value).strip())
    except ValueError:
        return 0
