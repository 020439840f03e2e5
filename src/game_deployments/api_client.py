"""Client for the managed deployment API (alternate execution backend)."""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from .constants import (
    API_CONTRACTS_PATH,
    API_DEPLOY_PATH,
    API_EXECUTE_PATH,
    API_POLL_INTERVAL,
    API_POLL_TIMEOUT,
    API_TRANSACTION_PATH,
    API_WALLET_PATH,
    HTTP_TIMEOUT,
)
from .exceptions import ApiError, ConfigError, ContractExecutionError

logger = logging.getLogger(__name__)

TX_PENDING = "PENDING"
TX_CONFIRMED = "CONFIRMED"
TX_FAILED = "FAILED"


class ManagedDeploymentClient:
    """
    Talks to the managed controller API.

    Responses are wrapped as {"meta": {...}, "data": {...}}; methods return
    the "data" member.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not base_url or not token:
            raise ConfigError("Managed API mode requires both an API URL and a controller token")
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            }
        )
        self._sleep = sleep

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=body, timeout=HTTP_TIMEOUT)
        except requests.RequestException as e:
            raise ApiError(f"Managed API request to {url} failed: {e}") from e

        if not response.ok:
            raise ApiError(
                f"Managed API request failed: {response.status_code} {response.reason} - {response.text}",
                status_code=response.status_code,
            )

        return response.json().get("data")

    def get_wallet(self) -> Dict[str, Any]:
        """Controller wallet info: address, balance, lastFundedAt."""
        return self._request("GET", API_WALLET_PATH)

    def deploy_contract(
        self, factory_type: str, chain_id: int, **params: Any
    ) -> Dict[str, Any]:
        """
        Request a contract deployment.

        Args:
            factory_type: e.g. "ScoreFactory", "MatchFactory"
            chain_id: Target chain
            **params: Factory-specific parameters (scoreAddress, matchAddress, ...);
                None values are omitted

        Returns:
            Dict with contractAddress, txHash, contractType, deploymentId
        """
        body: Dict[str, Any] = {"factoryType": factory_type, "chainId": chain_id}
        body.update({k: v for k, v in params.items() if v is not None})
        return self._request("POST", API_DEPLOY_PATH, body)

    def execute_contract_function(
        self,
        contract_address: str,
        function_name: str,
        params: Dict[str, Any],
        chain_id: int,
    ) -> Dict[str, Any]:
        return self._request(
            "POST",
            API_EXECUTE_PATH,
            {
                "contractAddress": contract_address,
                "functionName": function_name,
                "params": params,
                "chainId": chain_id,
            },
        )

    def get_transaction_status(self, tx_hash: str) -> Dict[str, Any]:
        return self._request("GET", API_TRANSACTION_PATH.format(tx_hash=tx_hash))

    def wait_for_transaction(
        self,
        tx_hash: str,
        polling_interval: float = API_POLL_INTERVAL,
        timeout: float = API_POLL_TIMEOUT,
    ) -> Dict[str, Any]:
        """
        Poll a transaction until it is no longer pending.

        Returns:
            Final transaction status dict (status CONFIRMED or FAILED)

        Raises:
            ContractExecutionError: If still pending after timeout seconds
        """
        start = time.monotonic()
        while True:
            status = self.get_transaction_status(tx_hash)
            if status.get("status") != TX_PENDING:
                return status

            elapsed = time.monotonic() - start
            if elapsed >= timeout:
                raise ContractExecutionError(
                    f"Transaction {tx_hash} timed out after {timeout}s", tx_hash=tx_hash
                )
            self._sleep(polling_interval)

    def get_contracts(self) -> List[Dict[str, Any]]:
        return self._request("GET", API_CONTRACTS_PATH)
