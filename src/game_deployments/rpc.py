"""Read-only JSON-RPC calls against a chain node."""

import logging
from typing import Any, List, Optional

import requests

from .constants import HTTP_TIMEOUT
from .exceptions import RpcError

logger = logging.getLogger(__name__)


def rpc_call(rpc_url: str, method: str, params: Optional[List[Any]] = None) -> Any:
    """
    Issue a single JSON-RPC request.

    Args:
        rpc_url: RPC endpoint URL
        method: JSON-RPC method, e.g. "eth_getCode"
        params: Positional params

    Returns:
        The "result" member of the response

    Raises:
        RpcError: On network error, non-200 status, RPC error or missing result
    """
    try:
        response = requests.post(
            rpc_url,
            json={
                "jsonrpc": "2.0",
                "method": method,
                "params": params or [],
                "id": 1,
            },
            timeout=HTTP_TIMEOUT,
        )
    except requests.RequestException as e:
        raise RpcError(f"Network error during {method}: {e}") from e

    if response.status_code != 200:
        raise RpcError(f"{method} failed with HTTP status {response.status_code}")

    try:
        body = response.json()
    except ValueError as e:
        raise RpcError(f"{method} returned invalid JSON") from e

    if "error" in body:
        raise RpcError(f"RPC error from {method}: {body['error']}")
    if "result" not in body:
        raise RpcError(f"{method} response has no result")

    return body["result"]


def get_code(address: str, rpc_url: str, block: str = "latest") -> str:
    """Return the hex bytecode at an address ("0x" when there is none)."""
    return rpc_call(rpc_url, "eth_getCode", [address, block]) or "0x"


def get_chain_id(rpc_url: str) -> int:
    return int(rpc_call(rpc_url, "eth_chainId"), 16)


def contract_exists_on_chain(address: Optional[str], rpc_url: str) -> bool:
    """
    Check whether an address holds contract code on the current chain state.

    Any RPC failure is reported as "does not exist" so the caller redeploys.
    """
    if not address:
        return False

    try:
        code = get_code(address, rpc_url)
    except RpcError as e:
        logger.warning("Could not fetch code at %s: %s", address, e)
        return False

    return code not in ("", "0x", "0x0")
