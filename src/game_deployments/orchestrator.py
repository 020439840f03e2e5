"""
Contract deployment orchestration.

DeploymentOrchestrator.assure_contracts_deployed() makes sure every contract
type listed in the requirements is live on a chain: it verifies stored
addresses against on-chain code, deploys what is missing in dependency
order, wires permissions between newly deployed contracts and returns an
aggregate result. Only one run per chain executes at a time.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Mapping, Optional

from .api_client import ManagedDeploymentClient
from .config import Settings
from .deployers import Deployer, DirectDeployer, ManagedDeployer
from .exceptions import ConfigError
from .executor import ExecutionOutcome, execute_plan
from .permissions import ActionSender, execute_permissions, transaction_action_sender
from .planner import create_deployment_plan
from .registry import (
    DEFAULT_CONFIGS,
    ContractTypeConfig,
    build_registry,
    with_prize_matches_per_pool,
)
from .rpc import contract_exists_on_chain
from .storage import AddressStorage, KeyStorage, load_requirements
from .transactions import TransactionSender
from .types import (
    AssureContractsDeployedResult,
    ContractType,
    PermissionContext,
    PermissionResult,
)
from .verifier import AddressSource, CodeCheck, get_existing_contracts

logger = logging.getLogger(__name__)

RequirementsSource = Callable[[], Awaitable[List[ContractType]]]
ControllerAddressSource = Callable[[], Awaitable[Optional[str]]]


class DeploymentLocks:
    """
    In-flight orchestration runs keyed by chain id.

    An entry exists exactly while a run for that chain is executing.
    """

    def __init__(self):
        self._runs: Dict[int, "asyncio.Task[AssureContractsDeployedResult]"] = {}

    def get(self, chain_id: int) -> Optional["asyncio.Task[AssureContractsDeployedResult]"]:
        return self._runs.get(chain_id)

    def acquire(self, chain_id: int, run: "asyncio.Task[AssureContractsDeployedResult]") -> None:
        if chain_id in self._runs:
            raise RuntimeError(f"Deployment already in flight for chain {chain_id}")
        self._runs[chain_id] = run

    def release(self, chain_id: int, run: Optional[asyncio.Task]) -> None:
        if self._runs.get(chain_id) is run:
            del self._runs[chain_id]

    def __contains__(self, chain_id: object) -> bool:
        return chain_id in self._runs

    def __len__(self) -> int:
        return len(self._runs)


def build_message(
    outcome: ExecutionOutcome, permission_results: List[PermissionResult]
) -> str:
    permission_successes = sum(1 for r in permission_results if r.success)
    permission_failures = len(permission_results) - permission_successes

    parts = []
    if outcome.total_deployed:
        parts.append(f"deployed {outcome.total_deployed} new contract(s)")
    if outcome.total_existing:
        parts.append(f"{outcome.total_existing} already existed")
    if outcome.total_failed:
        parts.append(f"{outcome.total_failed} deployment(s) failed")
    if permission_successes:
        parts.append(f"{permission_successes} permission(s) set")
    if permission_failures:
        parts.append(f"{permission_failures} permission(s) failed")

    if not parts:
        return "No contracts to deploy"
    return "Contract deployment complete: " + ", ".join(parts)


def _consume_run_exception(run: "asyncio.Task[AssureContractsDeployedResult]") -> None:
    # every caller may have stopped waiting; mark the error as retrieved
    if run.cancelled():
        return
    error = run.exception()
    if error is not None:
        logger.debug("Deployment run finished with %s: %s", type(error).__name__, error)


class DeploymentOrchestrator:
    """Ensures the required contract set is deployed and wired on a chain."""

    def __init__(
        self,
        registry: Mapping[ContractType, ContractTypeConfig],
        load_requirements: RequirementsSource,
        load_addresses: AddressSource,
        has_code: CodeCheck,
        send_action: Optional[ActionSender] = None,
        get_controller_address: Optional[ControllerAddressSource] = None,
        managed_mode: bool = False,
        default_chain_id: Optional[int] = None,
        locks: Optional[DeploymentLocks] = None,
    ):
        """
        Args:
            registry: Contract type configs with deploy functions bound
            load_requirements: Returns the contract types the application needs
            load_addresses: Returns stored context -> key -> address map for a chain
            has_code: Returns True if an address holds contract code
            send_action: Executes one permission action, returning its tx hash;
                required unless managed_mode is set
            get_controller_address: Returns the controller account address
            managed_mode: Permission wiring is left to the managed deployment API
            default_chain_id: Chain used when assure_contracts_deployed() gets none
            locks: In-flight run store; pass a shared one to gate several orchestrators

        Raises:
            ConfigError: If send_action is missing outside managed mode
        """
        if send_action is None and not managed_mode:
            raise ConfigError("A permission action sender is required outside managed mode")

        self.registry = registry
        self.load_requirements = load_requirements
        self.load_addresses = load_addresses
        self.has_code = has_code
        self.send_action = send_action
        self.get_controller_address = get_controller_address
        self.managed_mode = managed_mode
        self.default_chain_id = default_chain_id
        self.locks = locks if locks is not None else DeploymentLocks()

    async def assure_contracts_deployed(
        self, chain_id: Optional[int] = None
    ) -> AssureContractsDeployedResult:
        """
        Ensure every required contract is deployed on a chain.

        Safe to call repeatedly and concurrently. If a run for the chain is
        already in flight, this waits for it to finish and then evaluates the
        current state from scratch, so it never deploys the same set twice.
        Returning early (e.g. cancellation of the caller) does not stop a run.

        Args:
            chain_id: Target chain (defaults to default_chain_id)

        Returns:
            AssureContractsDeployedResult; deployment and permission failures are
            reported in it rather than raised

        Raises:
            ConfigError: If no chain id is available or the requirements contain
                a dependency cycle
        """
        resolved_chain_id = chain_id if chain_id is not None else self.default_chain_id
        if resolved_chain_id is None:
            raise ConfigError("No chain id provided and no default chain id is configured")

        while True:
            in_flight = self.locks.get(resolved_chain_id)
            if in_flight is None:
                break
            logger.info("Waiting for in-flight deployment on chain %s", resolved_chain_id)
            try:
                await asyncio.shield(in_flight)
            except Exception as e:
                # only the settled state matters; it is re-read below
                logger.debug("In-flight deployment on chain %s failed: %s", resolved_chain_id, e)

        run = asyncio.create_task(self._run_exclusive(resolved_chain_id))
        run.add_done_callback(_consume_run_exception)
        self.locks.acquire(resolved_chain_id, run)
        return await asyncio.shield(run)

    async def _run_exclusive(self, chain_id: int) -> AssureContractsDeployedResult:
        try:
            return await self._execute_deployment(chain_id)
        finally:
            self.locks.release(chain_id, asyncio.current_task())

    async def _load_required(self) -> List[ContractType]:
        try:
            return list(await self.load_requirements())
        except Exception as e:
            logger.warning("Could not load required contracts, assuming none: %s", e)
            return []

    async def _controller_address(self) -> Optional[str]:
        if self.get_controller_address is None:
            return None
        try:
            return await self.get_controller_address()
        except Exception as e:
            logger.error("Failed to resolve controller address: %s", e)
            return None

    async def _wire_permissions(self, context: PermissionContext) -> List[PermissionResult]:
        if self.managed_mode:
            logger.info("Managed mode - permissions are handled by the deployment API")
            return []
        logger.info("Setting contract permissions...")
        return await execute_permissions(context, self.registry, self.send_action)

    async def _execute_deployment(self, chain_id: int) -> AssureContractsDeployedResult:
        logger.info("Checking required contracts on chain %s", chain_id)

        required = await self._load_required()
        if not required:
            logger.info("No contracts required, skipping deployment")
            return AssureContractsDeployedResult(
                success=True,
                message="No contracts required. Skipping deployment.",
                chain_id=chain_id,
            )

        plan = create_deployment_plan(required, self.registry)

        existing = await get_existing_contracts(chain_id, required, self.load_addresses, self.has_code)
        logger.info(
            "Found %d existing contract(s): %s",
            len(existing),
            ", ".join(t.value for t in existing) or "none",
        )

        outcome = await execute_plan(plan, existing, self.registry)

        if outcome.all_existing:
            return AssureContractsDeployedResult(
                success=True,
                message=(
                    f"All {outcome.total_existing} contract(s) already deployed. "
                    "No new deployments needed."
                ),
                chain_id=chain_id,
                results=tuple(outcome.results),
                deployed_contracts=dict(outcome.deployed_addresses),
                total_existing=outcome.total_existing,
            )

        context = PermissionContext(
            deployed_addresses=dict(outcome.deployed_addresses),
            deployed_in_batch=outcome.deployed_in_batch,
            required_contracts=tuple(required),
            controller_address=await self._controller_address(),
        )
        permission_results = await self._wire_permissions(context)

        permission_failures = sum(1 for r in permission_results if not r.success)
        message = build_message(outcome, permission_results)
        logger.info(message)

        return AssureContractsDeployedResult(
            success=outcome.total_failed == 0 and permission_failures == 0,
            message=message,
            chain_id=chain_id,
            results=tuple(outcome.results),
            deployed_contracts=dict(outcome.deployed_addresses),
            total_deployed=outcome.total_deployed,
            total_failed=outcome.total_failed,
            total_existing=outcome.total_existing,
            permission_results=permission_results,
        )


def create_orchestrator(
    settings: Settings, locks: Optional[DeploymentLocks] = None
) -> DeploymentOrchestrator:
    """
    Wire an orchestrator from settings.

    Uses local JSON storage under settings.storage_dir, eth_getCode for
    existence checks and, depending on settings.is_managed_mode, either the
    managed deployment API or direct factory calls signed by the controller key.
    """
    paths = settings.paths
    address_storage = AddressStorage(paths.contracts)

    deployer: Deployer
    send_action: Optional[ActionSender] = None

    if settings.is_managed_mode:
        client = ManagedDeploymentClient(settings.api_url, settings.api_token)
        deployer = ManagedDeployer(client, settings.rpc_url, address_storage)

        async def get_controller_address() -> Optional[str]:
            wallet = await asyncio.to_thread(client.get_wallet)
            return wallet.get("address")

    else:
        key_storage = KeyStorage(paths.keys)
        sender = TransactionSender(settings.rpc_url, key_storage.get_controller_key())
        deployer = DirectDeployer(settings, sender, address_storage)
        send_action = transaction_action_sender(sender)

        async def get_controller_address() -> Optional[str]:
            return sender.address

    async def requirements() -> List[ContractType]:
        return await asyncio.to_thread(load_requirements, paths.requirements)

    async def stored_addresses(chain_id: int):
        return await asyncio.to_thread(address_storage.get, chain_id)

    async def has_code(address: str) -> bool:
        return await asyncio.to_thread(contract_exists_on_chain, address, settings.rpc_url)

    registry = build_registry(
        {t: deployer.deploy_function(t) for t in ContractType},
        with_prize_matches_per_pool(DEFAULT_CONFIGS, settings.prize_matches_per_pool),
    )

    return DeploymentOrchestrator(
        registry=registry,
        load_requirements=requirements,
        load_addresses=stored_addresses,
        has_code=has_code,
        send_action=send_action,
        get_controller_address=get_controller_address,
        managed_mode=settings.is_managed_mode,
        default_chain_id=settings.chain_id,
        locks=locks,
    )
