"""
Quickstart Example

Usage:
    RPC_FETCH_BASE_URL=https://api.example.com python examples/quickstart.py
"""

import asyncio
import logging

from rpc_fetch import RpcClient, RpcError, RpcErrorKind
from rpc_fetch.logging_setup import setup_structured_logger


async def main():
    setup_structured_logger(logging.DEBUG)
    client = RpcClient()

    try:
        status = await client.get("/v1/status", timeout_ms=2000)
        print(f"Server status: {status}")
    except RpcError as err:
        match err.kind:
            case RpcErrorKind.TIMEOUT | RpcErrorKind.NETWORK:
                print(f"Could not reach server: {err}")
            case RpcErrorKind.USER:
                print(f"Rejected ({err.status}): {err.message}")
            case RpcErrorKind.SERVER:
                print(f"Server failure: {err}")


if __name__ == "__main__":
    asyncio.run(main())
