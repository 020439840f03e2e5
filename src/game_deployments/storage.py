"""Local JSON file storage for contract addresses, controller key and requirements."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from eth_account import Account

from .constants import STORAGE_SLOTS
from .exceptions import StorageError
from .types import ContractType

logger = logging.getLogger(__name__)

CONTROLLER_KEY_NAME = "controller"


def load_json_file(path: Path) -> Dict[str, Any]:
    """
    Load a JSON object from disk or return empty dict.

    Args:
        path: File to read

    Returns:
        Parsed JSON object
        Empty dict if file doesn't exist, is corrupted or is not a JSON object

    Raises:
        StorageError: If the file exists but cannot be read
    """
    try:
        with open(path) as f:
            data = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return {}
    except OSError as e:
        raise StorageError(f"Could not read {path}: {e}") from e

    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object, got %s", path, type(data).__name__)
        return {}
    return data


def save_json_file(data: Dict[str, Any], path: Path) -> None:
    """
    Save a JSON object to disk.

    Creates parent directories if they don't exist.

    Raises:
        StorageError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        raise StorageError(f"Could not write {path}: {e}") from e


class AddressStorage:
    """
    Contract addresses per chain, stored as contracts.json.

    Layout: {"<chain id>": {"<context>": {"<key>": "0x..."}}}
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _object_entry(self, parent: Dict[str, Any], name: str) -> Dict[str, Any]:
        # malformed entries (strings, lists) are dropped and rebuilt
        entry = parent.get(name)
        if entry is None:
            return {}
        if not isinstance(entry, dict):
            logger.warning(
                "Ignoring malformed entry %r in %s: expected a JSON object, got %s",
                name,
                self.path,
                type(entry).__name__,
            )
            return {}
        return entry

    def get(self, chain_id: int) -> Dict[str, Dict[str, str]]:
        """
        Return the context -> key -> address map for a chain.

        Empty if the chain is absent; contexts that are not JSON objects and
        addresses that are not strings are left out.
        """
        chain = self._object_entry(load_json_file(self.path), str(chain_id))
        contexts: Dict[str, Dict[str, str]] = {}
        for context in chain:
            keys = self._object_entry(chain, context)
            contexts[context] = {k: v for k, v in keys.items() if isinstance(v, str)}
        return contexts

    def get_address(self, chain_id: int, contract_type: ContractType) -> Optional[str]:
        context, key = STORAGE_SLOTS[contract_type.value]
        return self.get(chain_id).get(context, {}).get(key)

    def set_address(self, chain_id: int, context: str, key: str, address: str) -> None:
        storage = load_json_file(self.path)
        chain = self._object_entry(storage, str(chain_id))
        keys = self._object_entry(chain, context)
        keys[key] = address
        chain[context] = keys
        storage[str(chain_id)] = chain
        save_json_file(storage, self.path)

    def set_contract_address(
        self, chain_id: int, contract_type: ContractType, address: str
    ) -> None:
        context, key = STORAGE_SLOTS[contract_type.value]
        self.set_address(chain_id, context, key, address)


class KeyStorage:
    """Named private keys, stored as keys.json."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def get_key(self, name: str) -> Optional[str]:
        return load_json_file(self.path).get(name)

    def set_key(self, name: str, value: str) -> None:
        keys = load_json_file(self.path)
        keys[name] = value
        save_json_file(keys, self.path)

    def get_controller_key(self) -> str:
        """
        Get the controller private key, generating and persisting one if missing.

        Returns:
            0x-prefixed hex private key
        """
        key = self.get_key(CONTROLLER_KEY_NAME)
        if key:
            return key

        key = Account.create().key.hex()
        if not key.startswith("0x"):
            key = "0x" + key
        self.set_key(CONTROLLER_KEY_NAME, key)
        logger.info("Generated new controller key in %s", self.path)
        return key

    def get_controller_address(self) -> str:
        """Checksummed address derived from the controller key."""
        return Account.from_key(self.get_controller_key()).address


def load_requirements(path: Path) -> List[ContractType]:
    """
    Load the contract types the application needs from requirements.json.

    Args:
        path: Path to requirements.json ({"contracts": ["Score", "Match", ...]})

    Returns:
        Contract types in file order, unknown names and duplicates removed
        Empty list if the file is missing, unreadable or malformed
    """
    try:
        data = load_json_file(path)
    except StorageError as e:
        logger.warning("Could not read requirements, assuming none: %s", e)
        return []

    names = data.get("contracts")
    if not isinstance(names, list):
        logger.info("No contracts array in %s", path)
        return []

    required: List[ContractType] = []
    for name in names:
        contract_type = ContractType.from_name(name)
        if contract_type is None:
            logger.warning("Ignoring unknown contract type %r in %s", name, path)
            continue
        if contract_type not in required:
            required.append(contract_type)

    logger.info(
        "Loaded %d required contract(s): %s",
        len(required),
        ", ".join(t.value for t in required) or "none",
    )
    return required
