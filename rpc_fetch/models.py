"""
rpc_fetch Data Models
"""

import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from .exceptions import ConfigurationError

DEFAULT_TIMEOUT_MS = 5000

BINARY_TYPES = (bytes, bytearray, memoryview)

# fetch() upper-cases only these; any other verb is sent as written
NORMALIZED_METHODS = frozenset({"DELETE", "GET", "HEAD", "OPTIONS", "POST", "PUT"})


def normalize_method(method: str) -> str:
    upper = method.upper()
    return upper if upper in NORMALIZED_METHODS else method


class RequestOptions(BaseModel):
    """Per-call options"""

    model_config = ConfigDict(frozen=True)

    timeout_ms: PositiveInt = Field(DEFAULT_TIMEOUT_MS, description="Deadline for the response head")
    headers: Dict[str, str] = Field(default_factory=dict, description="Extra request headers")


class RpcRequest(BaseModel):
    """One outbound request, immutable for the duration of a call"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: str = Field(..., min_length=1, description="HTTP verb")
    url: str = Field(..., min_length=1, description="Target URL")
    body: Optional[Any] = Field(None, description="JSON value or opaque binary payload")
    options: RequestOptions = Field(default_factory=RequestOptions)

    @field_validator("method")
    @classmethod
    def normalize_verb(cls, v):
        return normalize_method(v)

    @field_validator("url", mode="before")
    @classmethod
    def stringify_url(cls, v):
        # yarl.URL and friends
        if v is not None and not isinstance(v, str):
            return str(v)
        return v

    @property
    def is_binary(self) -> bool:
        return isinstance(self.body, BINARY_TYPES)


class ClientConfig(BaseModel):
    """RpcClient configuration"""

    base_url: str = Field("", description="Prefix joined to every request path")
    timeout_ms: int = Field(DEFAULT_TIMEOUT_MS, description="Default deadline in milliseconds")
    headers: Dict[str, str] = Field(default_factory=dict, description="Headers sent with every request")
    debug: bool = Field(False, description="Enable debug logging")

    @field_validator("timeout_ms")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("timeout_ms must be positive")
        return v

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Build a configuration from environment variables.

        - RPC_FETCH_BASE_URL: base URL (default: empty, paths must be absolute URLs)
        - RPC_FETCH_TIMEOUT_MS: default deadline (default: 5000)
        - RPC_FETCH_DEBUG: "true" enables debug logging

        Raises:
            ConfigurationError: If a variable holds an unusable value
        """
        raw_timeout = os.getenv("RPC_FETCH_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))
        try:
            timeout_ms = int(raw_timeout)
        except ValueError:
            raise ConfigurationError(f"RPC_FETCH_TIMEOUT_MS is not an integer: {raw_timeout!r}")
        if timeout_ms <= 0:
            raise ConfigurationError("RPC_FETCH_TIMEOUT_MS must be positive")

        return cls(
            base_url=os.getenv("RPC_FETCH_BASE_URL", ""),
            timeout_ms=timeout_ms,
            debug=os.getenv("RPC_FETCH_DEBUG", "false").lower() == "true",
        )
