"""
rpc_fetch - one JSON-over-HTTP call, one classified result
"""

from rpc_fetch.client import do_rpc, RpcClient
from rpc_fetch.sync_client import do_rpc_sync
from rpc_fetch.transport import dispatch
from rpc_fetch.classifier import classify, try_read_json_object, try_read_text
from rpc_fetch.models import ClientConfig, RequestOptions, RpcRequest
from rpc_fetch.exceptions import (
    RpcError,
    RpcErrorKind,
    TimeoutError,
    NetworkError,
    ServerError,
    UserError,
    ConfigurationError,
)
from rpc_fetch.__version__ import __version__

__all__ = [
    "do_rpc",
    "do_rpc_sync",
    "RpcClient",
    "dispatch",
    "classify",
    "try_read_json_object",
    "try_read_text",
    "ClientConfig",
    "RequestOptions",
    "RpcRequest",
    "RpcError",
    "RpcErrorKind",
    "TimeoutError",
    "NetworkError",
    "ServerError",
    "UserError",
    "ConfigurationError",
    "__version__",
]
