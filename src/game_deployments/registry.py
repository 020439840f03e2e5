"""
Contract type registry.

Each contract type is described by one ContractTypeConfig: the types it
depends on, how to build its deploy parameters from already resolved
addresses, its deploy function and the permission actions it needs once
the run's deployments have settled.
"""

from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .constants import EVENT_MATCH_RESULT, PRIZE_SHARE
from .deployers import DeployFunction, DeployParams
from .types import ContractPhase, ContractType, PermissionAction, PermissionContext

Score = ContractType.SCORE
Match = ContractType.MATCH
Prize = ContractType.PRIZE
EventBus = ContractType.EVENT_BUS
League = ContractType.LEAGUE
Tournament = ContractType.TOURNAMENT
Prediction = ContractType.PREDICTION
Heap = ContractType.HEAP

BuildDeployParams = Callable[[Mapping[ContractType, str]], DeployParams]
PermissionActionsFunction = Callable[[PermissionContext], List[PermissionAction]]


@dataclass(frozen=True)
class ContractTypeConfig:
    """Static description of one contract type."""

    dependencies: Tuple[ContractType, ...]
    build_deploy_params: BuildDeployParams
    get_permission_actions: PermissionActionsFunction
    deploy: Optional[DeployFunction] = None

    def with_deploy(self, deploy: DeployFunction) -> "ContractTypeConfig":
        return replace(self, deploy=deploy)


def _no_params(addresses: Mapping[ContractType, str]) -> DeployParams:
    return {}


def _no_permissions(context: PermissionContext) -> List[PermissionAction]:
    return []


def _score_permissions(context: PermissionContext) -> List[PermissionAction]:
    score = context.address(Score)
    if not score or context.phase(Score) is not ContractPhase.DEPLOYED_IN_BATCH:
        return []

    # Match records scores itself; it is authorized by its own config
    if context.phase(Match) is not None or context.is_required(Match):
        return []

    if not context.controller_address:
        return []

    return [
        PermissionAction(
            target_contract=score,
            abi_ref="Score",
            function_name="setRecorderAuthorization",
            args=(context.controller_address, True),
            description="Authorize controller to record scores (no Match contract)",
        )
    ]


def _match_permissions(context: PermissionContext) -> List[PermissionAction]:
    score = context.address(Score)
    match = context.address(Match)
    if not score or not match:
        return []

    # existing Match contracts were authorized when they were deployed
    if context.phase(Match) is not ContractPhase.DEPLOYED_IN_BATCH:
        return []

    return [
        PermissionAction(
            target_contract=score,
            abi_ref="Score",
            function_name="setRecorderAuthorization",
            args=(match, True),
            description="Authorize Match contract to record scores",
        )
    ]


def _prize_permissions(context: PermissionContext) -> List[PermissionAction]:
    score = context.address(Score)
    match = context.address(Match)
    prize = context.address(Prize)
    if not score or not match or not prize:
        return []

    if context.phase(Prize) is not ContractPhase.DEPLOYED_IN_BATCH:
        return []

    return [
        PermissionAction(
            target_contract=score,
            abi_ref="Score",
            function_name="setPrize",
            args=(prize,),
            description="Configure Score to forward winners to Prize pools",
        ),
        PermissionAction(
            target_contract=prize,
            abi_ref="Prize",
            function_name="setRecorderAuthorization",
            args=(score, True),
            description="Authorize Score contract to record prize pool results",
        ),
        PermissionAction(
            target_contract=match,
            abi_ref="Match",
            function_name="registerShareRecipient",
            args=(prize, PRIZE_SHARE),
            description="Register Prize contract as a share recipient in Match",
        ),
    ]


def _event_bus_permissions(context: PermissionContext) -> List[PermissionAction]:
    event_bus = context.address(EventBus)
    if not event_bus or context.phase(EventBus) is not ContractPhase.DEPLOYED_IN_BATCH:
        return []

    actions: List[PermissionAction] = []

    match = context.address(Match)
    if match:
        actions.append(
            PermissionAction(
                target_contract=event_bus,
                abi_ref="EventBus",
                function_name="setEmitterAuthorization",
                args=(match, True),
                description="Authorize Match contract to emit events via EventBus",
            )
        )

    score = context.address(Score)
    if score:
        actions.append(
            PermissionAction(
                target_contract=event_bus,
                abi_ref="EventBus",
                function_name="registerListener",
                args=(EVENT_MATCH_RESULT, score),
                description="Register Score contract as listener for match results",
            )
        )

    return actions


DEFAULT_CONFIGS: Dict[ContractType, ContractTypeConfig] = {
    Score: ContractTypeConfig(
        dependencies=(),
        build_deploy_params=_no_params,
        get_permission_actions=_score_permissions,
    ),
    Match: ContractTypeConfig(
        dependencies=(Score,),
        build_deploy_params=lambda addresses: {"score_address": addresses.get(Score)},
        get_permission_actions=_match_permissions,
    ),
    Prize: ContractTypeConfig(
        dependencies=(Score, Match),
        build_deploy_params=lambda addresses: {"match_address": addresses.get(Match)},
        get_permission_actions=_prize_permissions,
    ),
    EventBus: ContractTypeConfig(
        dependencies=(),
        build_deploy_params=_no_params,
        get_permission_actions=_event_bus_permissions,
    ),
    League: ContractTypeConfig(
        dependencies=(Match,),
        build_deploy_params=lambda addresses: {"match_address": addresses.get(Match)},
        get_permission_actions=_no_permissions,
    ),
    Tournament: ContractTypeConfig(
        dependencies=(Score,),
        build_deploy_params=lambda addresses: {"score_address": addresses.get(Score)},
        get_permission_actions=_no_permissions,
    ),
    # Tournament and League are optional integrations, linked when already resolved
    Prediction: ContractTypeConfig(
        dependencies=(Match,),
        build_deploy_params=lambda addresses: {
            "match_address": addresses.get(Match),
            "tournament_address": addresses.get(Tournament),
            "league_address": addresses.get(League),
        },
        get_permission_actions=_no_permissions,
    ),
    Heap: ContractTypeConfig(
        dependencies=(Score,),
        build_deploy_params=lambda addresses: {"score_address": addresses.get(Score)},
        get_permission_actions=_no_permissions,
    ),
}


def with_prize_matches_per_pool(
    configs: Mapping[ContractType, ContractTypeConfig], matches_per_pool: Optional[int]
) -> Dict[ContractType, ContractTypeConfig]:
    """
    Copy of configs whose Prize params carry a pool size for deployPrizeWithConfig.

    A falsy matches_per_pool leaves the configs unchanged.
    """
    updated = dict(configs)
    if not matches_per_pool or Prize not in updated:
        return updated

    base = updated[Prize]

    def build_deploy_params(addresses: Mapping[ContractType, str]) -> DeployParams:
        params = dict(base.build_deploy_params(addresses))
        params["matches_per_pool"] = matches_per_pool
        return params

    updated[Prize] = replace(base, build_deploy_params=build_deploy_params)
    return updated


def build_registry(
    deploy_functions: Mapping[ContractType, DeployFunction],
    configs: Optional[Mapping[ContractType, ContractTypeConfig]] = None,
) -> Dict[ContractType, ContractTypeConfig]:
    """
    Bind deploy functions to the contract type configs.

    Args:
        deploy_functions: Deploy callable per contract type; types without one
            keep deploy=None and fail if a run tries to deploy them
        configs: Base configs (defaults to DEFAULT_CONFIGS)

    Returns:
        Registry in configs order
    """
    if configs is None:
        configs = DEFAULT_CONFIGS

    registry: Dict[ContractType, ContractTypeConfig] = {}
    for contract_type, config in configs.items():
        deploy = deploy_functions.get(contract_type)
        registry[contract_type] = config.with_deploy(deploy) if deploy else config
    return registry


def get_contract_dependencies(
    registry: Mapping[ContractType, ContractTypeConfig], contract_type: ContractType
) -> Tuple[ContractType, ...]:
    return registry[contract_type].dependencies
