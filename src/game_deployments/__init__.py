"""
game-deployments: deploy and wire on-chain game contracts (scores, matches,
prize pools, tournaments, leagues, prediction markets)
"""

from importlib.metadata import PackageNotFoundError, version

from .config import Settings, load_settings
from .exceptions import (
    ApiError,
    CircularDependencyError,
    ConfigError,
    ContractExecutionError,
    DeploymentError,
    RpcError,
    StorageError,
)
from .orchestrator import DeploymentLocks, DeploymentOrchestrator, create_orchestrator
from .planner import create_deployment_plan
from .registry import DEFAULT_CONFIGS, ContractTypeConfig, build_registry
from .types import (
    AssureContractsDeployedResult,
    ContractDeploymentResult,
    ContractPhase,
    ContractType,
    DeploymentPlanItem,
    DeploymentStatus,
    DeployResult,
    PermissionAction,
    PermissionContext,
    PermissionResult,
)

try:
    __version__ = version("game-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DeploymentOrchestrator",
    "DeploymentLocks",
    "create_orchestrator",
    "create_deployment_plan",
    "Settings",
    "load_settings",
    "ContractTypeConfig",
    "DEFAULT_CONFIGS",
    "build_registry",
    "ContractType",
    "ContractPhase",
    "DeploymentStatus",
    "DeploymentPlanItem",
    "DeployResult",
    "ContractDeploymentResult",
    "PermissionAction",
    "PermissionContext",
    "PermissionResult",
    "AssureContractsDeployedResult",
    "DeploymentError",
    "ConfigError",
    "CircularDependencyError",
    "StorageError",
    "RpcError",
    "ApiError",
    "ContractExecutionError",
]
