"""Custom exception classes for game-deployments library."""

from typing import Optional


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ConfigError(DeploymentError, ValueError):
    """Raised when configuration is missing or invalid (chain id, factories, env)."""

    pass


class CircularDependencyError(ConfigError):
    """Raised when requested contract types depend on each other in a cycle."""

    pass


class StorageError(DeploymentError, OSError):
    """Raised when a local storage file cannot be read or written."""

    pass


class RpcError(DeploymentError, RuntimeError):
    """Raised when a JSON-RPC call fails or returns an error."""

    pass


class ApiError(DeploymentError, RuntimeError):
    """Raised when the managed deployment API returns a non-success response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ContractExecutionError(DeploymentError, RuntimeError):
    """Raised when a contract transaction reverts, fails or times out."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash
