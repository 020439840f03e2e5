"""
Signed contract writes from the controller account via web3.py.

All transactions of one TransactionSender come from a single account, so
callers must submit them one after another: nonces are taken from the
node's pending count at build time.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from eth_account import Account
from web3 import Web3

from .constants import RECEIPT_TIMEOUT
from .exceptions import ContractExecutionError

logger = logging.getLogger(__name__)


def _normalize_arg(value: Any) -> Any:
    # web3 rejects non-checksummed address arguments
    if isinstance(value, str) and Web3.is_address(value):
        return Web3.to_checksum_address(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_arg(v) for v in value]
    return value


def extract_deployed_address(receipt: Dict[str, Any], factory_address: str) -> Optional[str]:
    """
    Extract the created contract address from a factory transaction receipt.

    The factory's instance-created event carries the new address as its first
    indexed topic.

    Args:
        receipt: Transaction receipt with "logs"
        factory_address: Address of the factory that emitted the event

    Returns:
        Checksummed address, or None if no matching log is found
    """
    for log in receipt.get("logs", []):
        if str(log["address"]).lower() != factory_address.lower():
            continue
        topics = log.get("topics") or []
        if len(topics) < 2:
            continue
        topic = topics[1]
        topic_hex = topic if isinstance(topic, str) else Web3.to_hex(topic)
        return Web3.to_checksum_address("0x" + topic_hex[-40:])
    return None


class TransactionSender:
    """Builds, signs and sends contract transactions, waiting for each receipt."""

    def __init__(
        self,
        rpc_url: str,
        private_key: str,
        web3: Optional[Web3] = None,
        receipt_timeout: float = RECEIPT_TIMEOUT,
    ):
        self.web3 = web3 or Web3(Web3.HTTPProvider(rpc_url))
        self.account = Account.from_key(private_key)
        self.receipt_timeout = receipt_timeout

    @property
    def address(self) -> str:
        return self.account.address

    def write_contract(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Tuple[str, Dict[str, Any]]:
        """
        Call a state-changing contract function and wait for it to be mined.

        Returns:
            (transaction hash hex string, receipt)

        Raises:
            ContractExecutionError: If the transaction reverts
        """
        contract = self.web3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        function = getattr(contract.functions, function_name)(*[_normalize_arg(a) for a in args])

        tx = function.build_transaction(
            {
                "from": self.account.address,
                "nonce": self.web3.eth.get_transaction_count(self.account.address, "pending"),
                "chainId": self.web3.eth.chain_id,
            }
        )
        signed_tx = self.web3.eth.account.sign_transaction(tx, self.account.key)
        tx_hash = Web3.to_hex(self.web3.eth.send_raw_transaction(signed_tx.raw_transaction))
        logger.info("%s tx sent to %s: %s", function_name, address, tx_hash)

        receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        if receipt["status"] != 1:
            raise ContractExecutionError(f"{function_name} reverted: {tx_hash}", tx_hash=tx_hash)

        logger.info("%s confirmed in block %s", function_name, receipt["blockNumber"])
        return tx_hash, receipt
