"""Path management utilities for game-deployments library."""

from pathlib import Path
from typing import NamedTuple, Optional, Union


class StoragePaths(NamedTuple):
    """Files kept in the storage directory."""

    contracts: Path  # chain id -> context -> key -> address
    keys: Path  # controller private key
    requirements: Path  # contract types the application needs


def get_default_storage_dir() -> Path:
    """
    Get default storage directory (current working directory).

    Returns:
        Path to ./.game-deployments
    """
    return Path.cwd() / ".game-deployments"


def get_storage_paths(storage_root: Optional[Union[Path, str]] = None) -> StoragePaths:
    """
    Get storage file paths.

    Args:
        storage_root: Custom storage directory (defaults to ./.game-deployments)

    Returns:
        StoragePaths with absolute contracts, keys and requirements paths
    """
    if storage_root is None:
        storage_root = get_default_storage_dir()
    else:
        storage_root = Path(storage_root).absolute()

    return StoragePaths(
        contracts=storage_root / "contracts.json",
        keys=storage_root / "keys.json",
        requirements=storage_root / "requirements.json",
    )
