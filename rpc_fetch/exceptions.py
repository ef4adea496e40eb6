"""
rpc_fetch Exceptions

Every failed call raises exactly one ``RpcError`` subclass. Each carries a
``kind`` tag so callers can switch on it instead of chaining isinstance checks:

    >>> try:
    ...     result = await do_rpc("GET", url)
    ... except RpcError as err:
    ...     match err.kind:
    ...         case RpcErrorKind.USER:
    ...             show(err.message)
    ...         case RpcErrorKind.SERVER if err.status == 429:
    ...             slow_down()
    ...         case _:
    ...             show(str(err))
"""

from enum import Enum
from typing import Optional


class RpcErrorKind(str, Enum):
    """Tag identifying which failure an RpcError represents"""

    TIMEOUT = "timeout"
    NETWORK = "network"
    SERVER = "server"
    USER = "user"


class RpcError(Exception):
    """Base exception for rpc_fetch calls"""

    kind: RpcErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TimeoutError(RpcError):
    """The deadline elapsed before the server answered"""

    kind = RpcErrorKind.TIMEOUT

    def __init__(self):
        super().__init__("Error talking to server.  Please try again.")


class NetworkError(RpcError):
    """The exchange failed before a usable HTTP response was obtained"""

    kind = RpcErrorKind.NETWORK

    def __init__(self):
        super().__init__("Error connecting to server.  Please check your connection.")


class UserError(RpcError):
    """
    Application-level failure reported by the server.

    Raised for a non-2xx response whose JSON body has a string
    ``user_error_message``. The message is meant for end-user display.
    """

    kind = RpcErrorKind.USER

    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.status = status

    def __repr__(self) -> str:
        return f"UserError(message={self.message!r}, status={self.status})"


class ServerError(RpcError):
    """
    The server broke the JSON contract or answered with an error status.

    ``detail`` keeps the raw diagnostic; ``message`` is what callers show.
    """

    kind = RpcErrorKind.SERVER

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(f"Error talking to server: {message}")
        self.detail = message
        self.status = status

    def is_400(self) -> bool:
        """True when the status is a client error (400-499)"""
        return self.status is not None and 400 <= self.status <= 499

    def is_500(self) -> bool:
        """True when the status is a server error (500-599)"""
        return self.status is not None and 500 <= self.status <= 599

    def __repr__(self) -> str:
        return f"ServerError(message={self.detail!r}, status={self.status})"


class ConfigurationError(Exception):
    """Client configuration error"""

    pass
