"""Environment-driven settings for game-deployments library."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from .constants import (
    API_TOKEN_ENV,
    API_URL_ENV,
    CHAIN_ID_ENV,
    DEFAULT_RPC_URL,
    FACTORY_ENV,
    PRIZE_MATCHES_PER_POOL_ENV,
    RPC_URL_ENV,
    STORAGE_DIR_ENV,
)
from .exceptions import ConfigError
from .paths import StoragePaths, get_default_storage_dir, get_storage_paths
from .types import ContractType


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for deployments on one chain."""

    rpc_url: str = DEFAULT_RPC_URL
    chain_id: Optional[int] = None
    factories: Dict[ContractType, str] = field(default_factory=dict)
    api_url: Optional[str] = None
    api_token: Optional[str] = None
    storage_dir: Path = field(default_factory=get_default_storage_dir)
    prize_matches_per_pool: Optional[int] = None  # None deploys Prize with factory defaults

    @property
    def is_managed_mode(self) -> bool:
        """True when deployments go through the managed deployment API."""
        return bool(self.api_url and self.api_token)

    @property
    def paths(self) -> StoragePaths:
        return get_storage_paths(self.storage_dir)

    def factory_address(self, contract_type: ContractType) -> str:
        """
        Get the factory address for a contract type.

        Raises:
            ConfigError: If no factory is configured for the type
        """
        address = self.factories.get(contract_type)
        if not address:
            raise ConfigError(
                f"{contract_type.value} factory address not configured "
                f"(set ${FACTORY_ENV[contract_type.value]})"
            )
        return address


def _parse_int(raw: Optional[str], env_var: str) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw, 0)
    except ValueError as e:
        raise ConfigError(f"${env_var} must be an integer, got {raw!r}") from e


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Load settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Settings instance

    Raises:
        ConfigError: If $SDK_CHAIN_ID or $GAME_PRIZE_MATCHES_PER_POOL is set
            but not an integer
    """
    if environ is None:
        environ = os.environ

    factories: Dict[ContractType, str] = {}
    for name, env_var in FACTORY_ENV.items():
        address = environ.get(env_var)
        if address:
            factories[ContractType(name)] = address

    storage_dir = environ.get(STORAGE_DIR_ENV)

    return Settings(
        rpc_url=environ.get(RPC_URL_ENV) or DEFAULT_RPC_URL,
        chain_id=_parse_int(environ.get(CHAIN_ID_ENV), CHAIN_ID_ENV),
        factories=factories,
        api_url=environ.get(API_URL_ENV) or None,
        api_token=environ.get(API_TOKEN_ENV) or None,
        storage_dir=Path(storage_dir).absolute() if storage_dir else get_default_storage_dir(),
        prize_matches_per_pool=_parse_int(
            environ.get(PRIZE_MATCHES_PER_POOL_ENV), PRIZE_MATCHES_PER_POOL_ENV
        ),
    )
