"""
Response Classifier

Turns a completed HTTP response into a JSON object or exactly one RpcError.
Works on anything exposing ``status``, ``reason``, ``headers``, ``charset``
and ``async read()``, which aiohttp.ClientResponse does.
"""

import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from .exceptions import NetworkError, ServerError, UserError
from .utils import parse_content_length

logger = logging.getLogger("rpc_fetch.classifier")


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def loads_strict(raw) -> Any:
    """json.loads without the NaN/Infinity extension"""
    return json.loads(raw, parse_constant=_reject_constant)


def content_type_header(response) -> str:
    return (response.headers.get("content-type") or "").lower()


def has_body(response) -> bool:
    return parse_content_length(response.headers.get("content-length")) > 0


def is_success(status: int) -> bool:
    return 200 <= status <= 299


async def read_json_object(response) -> Dict[str, Any]:
    """
    Decode a 2xx body that must be a JSON object.

    Raises:
        ServerError: Wrong content-type, malformed JSON, or not an object
        NetworkError: The body could not be read
    """
    content_type = content_type_header(response)
    if not content_type.startswith("application/json"):
        raise ServerError(f"server response content-type is not json: {json.dumps(content_type)}")

    try:
        raw = await response.read()
    except (aiohttp.ClientError, OSError) as e:
        logger.warning("Failed reading response body", exc_info=True)
        raise NetworkError() from e

    try:
        result = loads_strict(raw)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("Response body is not valid JSON", exc_info=True)
        raise ServerError("server returned malformed json data") from e

    if not isinstance(result, dict):
        as_text = json.dumps(result, separators=(",", ":"), ensure_ascii=False)
        raise ServerError(f"server response is not a JSON object: {as_text}")
    return result


async def try_read_json_object(response) -> Optional[Dict[str, Any]]:
    """Best-effort JSON object read; None when anything is off"""
    if not has_body(response):
        return None
    if not content_type_header(response).startswith("application/json"):
        return None
    try:
        result = loads_strict(await response.read())
    except (aiohttp.ClientError, OSError, ValueError, UnicodeDecodeError):
        logger.debug("Ignoring unreadable JSON error body", exc_info=True)
        return None
    if not isinstance(result, dict):
        return None
    return result


async def try_read_text(response) -> Optional[str]:
    """Best-effort text/plain read; None when anything is off"""
    if not has_body(response):
        return None
    if not content_type_header(response).startswith("text/plain"):
        return None
    try:
        raw = await response.read()
    except (aiohttp.ClientError, OSError):
        logger.debug("Ignoring unreadable text error body", exc_info=True)
        return None
    try:
        return raw.decode(response.charset or "utf-8", errors="replace")
    except LookupError:
        # unknown charset label
        return raw.decode("utf-8", errors="replace")


async def classify(response) -> Dict[str, Any]:
    """
    Classify a response.

    Returns:
        Dict[str, Any]: Decoded JSON object, or {} for a 2xx without body

    Raises:
        UserError: Non-2xx with a string ``user_error_message`` in its JSON body
        ServerError: Any other non-2xx, or a 2xx that breaks the JSON contract
        NetworkError: A 2xx body that could not be read
    """
    status = response.status
    if is_success(status):
        if not has_body(response):
            return {}
        return await read_json_object(response)

    response_json = await try_read_json_object(response)
    if response_json is not None and isinstance(response_json.get("user_error_message"), str):
        raise UserError(response_json["user_error_message"], status)

    reason = response.reason or ""
    response_text = await try_read_text(response)
    if response_text is not None:
        raise ServerError(f"{status} {reason}, {response_text}", status)
    raise ServerError(f"{status} {reason}", status)
