"""Data types and dataclasses for game-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


class ContractType(Enum):
    """
    Closed set of deployable game contract types.

    Value strings are the names used in requirements.json and log output.
    """

    SCORE = "Score"
    MATCH = "Match"
    PRIZE = "Prize"
    EVENT_BUS = "EventBus"
    LEAGUE = "League"
    TOURNAMENT = "Tournament"
    PREDICTION = "Prediction"
    HEAP = "Heap"

    @classmethod
    def from_name(cls, name: Any) -> Optional["ContractType"]:
        """Return the contract type for a name such as "Match", or None if unknown."""
        for member in cls:
            if member.value == name:
                return member
        return None

    def __str__(self) -> str:
        return self.value


class DeploymentStatus(Enum):
    """Lifecycle of one contract within a deployment run."""

    PENDING = "pending"
    DEPLOYING = "deploying"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    ALREADY_EXISTS = "already_exists"


class ContractPhase(Enum):
    """How a resolved contract came to be available in the current run."""

    EXISTING = "existing"  # verified on-chain before the run started
    DEPLOYED_IN_BATCH = "deployed_in_batch"  # reached SUCCESS during this run


@dataclass(frozen=True)
class DeployResult:
    """Outcome of a single successful contract creation."""

    address: str
    tx_hash: str


@dataclass(frozen=True)
class DeploymentPlanItem:
    """One entry of the topologically ordered deployment plan."""

    type: ContractType
    depends_on: Tuple[ContractType, ...] = ()


@dataclass
class ContractDeploymentResult:
    """Per-type result, updated in place while the run progresses."""

    type: ContractType
    status: DeploymentStatus
    depends_on: Tuple[ContractType, ...] = ()
    address: Optional[str] = None
    tx_hash: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "status": self.status.value,
            "address": self.address,
            "tx_hash": self.tx_hash,
            "error": self.error,
            "depends_on": [dep.value for dep in self.depends_on],
        }


@dataclass(frozen=True)
class PermissionAction:
    """A single authorization call to issue after deployment."""

    target_contract: str
    abi_ref: str  # key into abis.ABIS, e.g. "Score"
    function_name: str
    args: Tuple[Any, ...]
    description: str


@dataclass(frozen=True)
class PermissionResult:
    """Outcome of executing one PermissionAction."""

    description: str
    success: bool
    tx_hash: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "success": self.success,
            "tx_hash": self.tx_hash,
            "error": self.error,
        }


@dataclass(frozen=True)
class PermissionContext:
    """Read-only view of the finished deployment handed to wiring functions."""

    deployed_addresses: Dict[ContractType, str]
    deployed_in_batch: FrozenSet[ContractType]
    required_contracts: Tuple[ContractType, ...]
    controller_address: Optional[str] = None

    def address(self, contract_type: ContractType) -> Optional[str]:
        return self.deployed_addresses.get(contract_type)

    def phase(self, contract_type: ContractType) -> Optional[ContractPhase]:
        """Return how the contract became available, or None if it is absent."""
        if contract_type in self.deployed_in_batch:
            return ContractPhase.DEPLOYED_IN_BATCH
        if contract_type in self.deployed_addresses:
            return ContractPhase.EXISTING
        return None

    def is_required(self, contract_type: ContractType) -> bool:
        return contract_type in self.required_contracts


@dataclass(frozen=True)
class AssureContractsDeployedResult:
    """Aggregate result of one orchestration run."""

    success: bool
    message: str
    chain_id: int
    results: Tuple[ContractDeploymentResult, ...] = ()
    deployed_contracts: Dict[ContractType, str] = field(default_factory=dict)
    total_deployed: int = 0
    total_failed: int = 0
    total_existing: int = 0
    permission_results: Optional[List[PermissionResult]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-serializable representation."""
        data: Dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "chain_id": self.chain_id,
            "results": [r.to_dict() for r in self.results],
            "deployed_contracts": {t.value: a for t, a in self.deployed_contracts.items()},
            "total_deployed": self.total_deployed,
            "total_failed": self.total_failed,
            "total_existing": self.total_existing,
        }
        if self.permission_results is not None:
            data["permission_results"] = [p.to_dict() for p in self.permission_results]
        return data
