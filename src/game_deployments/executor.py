"""Sequential execution of a deployment plan with per-type failure isolation."""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Sequence

from .exceptions import ConfigError
from .registry import ContractTypeConfig
from .types import (
    ContractDeploymentResult,
    ContractType,
    DeploymentPlanItem,
    DeploymentStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class ExecutionOutcome:
    """State of a plan after the executor has walked it."""

    results: List[ContractDeploymentResult]
    deployed_addresses: Dict[ContractType, str] = field(default_factory=dict)
    total_deployed: int = 0
    total_failed: int = 0
    total_existing: int = 0

    @property
    def all_existing(self) -> bool:
        return self.total_existing == len(self.results)

    @property
    def deployed_in_batch(self) -> FrozenSet[ContractType]:
        return frozenset(r.type for r in self.results if r.status is DeploymentStatus.SUCCESS)


def initialize_results(
    plan: Sequence[DeploymentPlanItem], existing: Mapping[ContractType, str]
) -> List[ContractDeploymentResult]:
    """Create one result per plan item: ALREADY_EXISTS if verified, PENDING otherwise."""
    results = []
    for item in plan:
        address = existing.get(item.type)
        results.append(
            ContractDeploymentResult(
                type=item.type,
                status=DeploymentStatus.ALREADY_EXISTS if address else DeploymentStatus.PENDING,
                depends_on=item.depends_on,
                address=address,
            )
        )
    return results


async def execute_plan(
    plan: Sequence[DeploymentPlanItem],
    existing: Mapping[ContractType, str],
    registry: Mapping[ContractType, ContractTypeConfig],
) -> ExecutionOutcome:
    """
    Deploy every missing plan item in order.

    A failed deployment is recorded and the walk continues; any later item
    depending on a type without an address is marked SKIPPED, so failures
    cascade forward through the plan.

    Args:
        plan: Topologically ordered plan
        existing: Verified on-chain addresses; these items are not deployed
        registry: Contract type configs with deploy functions

    Returns:
        ExecutionOutcome with per-type results and final addresses
    """
    results = initialize_results(plan, existing)
    outcome = ExecutionOutcome(
        results=results,
        deployed_addresses=dict(existing),
        total_existing=sum(1 for r in results if r.status is DeploymentStatus.ALREADY_EXISTS),
    )

    if outcome.all_existing:
        logger.info("All %d contract(s) already exist", outcome.total_existing)
        return outcome

    deployed_addresses = outcome.deployed_addresses
    for step, (item, result) in enumerate(zip(plan, results), start=1):
        if result.status is DeploymentStatus.ALREADY_EXISTS:
            logger.info("Skipping %s - already deployed at %s", item.type.value, result.address)
            continue

        missing = [dep for dep in item.depends_on if dep not in deployed_addresses]
        if missing:
            result.status = DeploymentStatus.SKIPPED
            result.error = "Missing dependencies: " + ", ".join(dep.value for dep in missing)
            logger.warning("Skipping %s due to missing dependencies: %s", item.type.value, result.error)
            continue

        result.status = DeploymentStatus.DEPLOYING
        logger.info("Deploying %s (step %d/%d)", item.type.value, step, len(plan))

        try:
            config = registry[item.type]
            if config.deploy is None:
                raise ConfigError(f"No deploy function configured for {item.type.value}")
            params = config.build_deploy_params(dict(deployed_addresses))
            deployed = await config.deploy(params)
        except Exception as e:
            result.status = DeploymentStatus.FAILED
            result.error = str(e) or type(e).__name__
            outcome.total_failed += 1
            logger.error("Failed to deploy %s: %s", item.type.value, result.error, exc_info=True)
            continue

        result.status = DeploymentStatus.SUCCESS
        result.address = deployed.address
        result.tx_hash = deployed.tx_hash
        deployed_addresses[item.type] = deployed.address
        outcome.total_deployed += 1
        logger.info("Successfully deployed %s at %s", item.type.value, deployed.address)

    return outcome
