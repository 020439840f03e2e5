"""Existence verification of stored contract addresses against on-chain state."""

import logging
from typing import Awaitable, Callable, Dict, Iterable, Mapping, Optional

from .constants import STORAGE_SLOTS
from .types import ContractType

logger = logging.getLogger(__name__)

StoredAddresses = Mapping[str, Mapping[str, str]]  # context -> key -> address
AddressSource = Callable[[int], Awaitable[StoredAddresses]]
CodeCheck = Callable[[str], Awaitable[bool]]


def _stored_address(stored: StoredAddresses, context: str, key: str) -> Optional[str]:
    entries = stored.get(context)
    if entries is None:
        return None
    if not isinstance(entries, Mapping):
        logger.warning("Ignoring malformed stored context %r: %s", context, type(entries).__name__)
        return None
    address = entries.get(key)
    if address is not None and not isinstance(address, str):
        logger.warning("Ignoring malformed stored address for %s.%s: %r", context, key, address)
        return None
    return address


async def get_existing_contracts(
    chain_id: int,
    contract_types: Iterable[ContractType],
    load_addresses: AddressSource,
    has_code: CodeCheck,
) -> Dict[ContractType, str]:
    """
    Find requested contract types that are stored AND have code on-chain.

    Storage is only a cache: a stored address without code (chain reset,
    failed deployment) is treated as absent so it gets redeployed. A failure
    to read storage is logged and treated as "nothing stored".

    Args:
        chain_id: Chain to look up
        contract_types: Types to verify
        load_addresses: Returns the stored context -> key -> address map for a chain
        has_code: Returns True if an address holds contract code

    Returns:
        Map of verified contract type -> address
    """
    existing: Dict[ContractType, str] = {}

    try:
        stored = await load_addresses(chain_id)
    except Exception as e:
        logger.warning("Failed to fetch existing contracts for chain %s: %s", chain_id, e)
        return existing

    if not isinstance(stored, Mapping):
        logger.warning(
            "Ignoring stored contracts for chain %s: expected a mapping, got %s",
            chain_id,
            type(stored).__name__,
        )
        return existing

    for contract_type in contract_types:
        context, key = STORAGE_SLOTS[contract_type.value]
        address = _stored_address(stored, context, key)
        if not address:
            continue

        try:
            live = await has_code(address)
        except Exception as e:
            logger.warning("Code check for %s at %s failed: %s", contract_type.value, address, e)
            live = False

        if live:
            existing[contract_type] = address
        else:
            logger.warning(
                "Stored %s address %s not found on-chain (will redeploy)",
                contract_type.value,
                address,
            )

    return existing
