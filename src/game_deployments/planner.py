"""Deployment ordering for requested contract types."""

from collections import deque
from typing import Deque, Dict, Iterable, List, Mapping

from .exceptions import CircularDependencyError, ConfigError
from .registry import ContractTypeConfig, get_contract_dependencies
from .types import ContractType, DeploymentPlanItem


def create_deployment_plan(
    contract_types: Iterable[ContractType],
    registry: Mapping[ContractType, ContractTypeConfig],
) -> List[DeploymentPlanItem]:
    """
    Topologically sort contract types by their declared dependencies (Kahn's algorithm).

    Only dependencies that are themselves requested are considered; a type
    whose dependency was not requested is placed as if it had none. Ties are
    broken by request order.

    Args:
        contract_types: Requested types (duplicates ignored)
        registry: Contract type configs providing dependencies

    Returns:
        Plan items where every item's depends_on entries appear earlier

    Raises:
        ConfigError: If a requested type is not in the registry
        CircularDependencyError: If the requested types contain a dependency cycle
    """
    requested: Dict[ContractType, None] = dict.fromkeys(contract_types)

    for contract_type in requested:
        if contract_type not in registry:
            raise ConfigError(f"No registry entry for contract type {contract_type}")

    in_request_deps: Dict[ContractType, List[ContractType]] = {
        t: [dep for dep in get_contract_dependencies(registry, t) if dep in requested]
        for t in requested
    }

    in_degree: Dict[ContractType, int] = {t: 0 for t in requested}
    dependents: Dict[ContractType, List[ContractType]] = {t: [] for t in requested}
    for contract_type, deps in in_request_deps.items():
        for dep in deps:
            dependents[dep].append(contract_type)
            in_degree[contract_type] += 1

    queue: Deque[ContractType] = deque(t for t, degree in in_degree.items() if degree == 0)
    plan: List[DeploymentPlanItem] = []

    while queue:
        contract_type = queue.popleft()
        plan.append(DeploymentPlanItem(type=contract_type, depends_on=tuple(in_request_deps[contract_type])))

        for dependent in dependents[contract_type]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(plan) != len(requested):
        cyclic = ", ".join(t.value for t, degree in in_degree.items() if degree > 0)
        raise CircularDependencyError(f"Circular dependency in deployment plan: {cyclic}")

    return plan
