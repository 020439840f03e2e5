"""Shared pytest fixtures for game-deployments tests."""

import asyncio
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

import pytest

from game_deployments.constants import STORAGE_SLOTS
from game_deployments.exceptions import ContractExecutionError
from game_deployments.orchestrator import DeploymentLocks, DeploymentOrchestrator
from game_deployments.registry import build_registry
from game_deployments.types import ContractType, DeployResult, PermissionAction

CHAIN_ID = 31337
CONTROLLER = "0x00000000000000000000000000000000000000C0"


class FakeChain:
    """
    In-memory stand-in for a chain node plus address storage.

    Deploy functions assign sequential addresses, mark them as holding code
    and write them into storage, the way the real deployers do.
    """

    def __init__(self):
        self.code: Set[str] = set()
        self.stored: Dict[str, Dict[str, str]] = {}
        self.deploy_calls: List[Tuple[ContractType, Dict[str, Any]]] = []
        self.sent_actions: List[PermissionAction] = []
        self.failing_types: Set[ContractType] = set()
        self.failing_functions: Set[str] = set()
        self.deploy_delay = 0.0
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def store(self, contract_type: ContractType, address: str, live: bool = True) -> None:
        context, key = STORAGE_SLOTS[contract_type.value]
        # mirror AddressStorage.set_address: malformed context entries are rebuilt
        if not isinstance(self.stored.get(context), dict):
            self.stored[context] = {}
        self.stored[context][key] = address
        if live:
            self.code.add(address)

    def reset_chain(self) -> None:
        """Wipe on-chain code but keep storage, like restarting a dev node."""
        self.code.clear()

    def deploy_function(self, contract_type: ContractType):
        async def deploy(params: Dict[str, Any]) -> DeployResult:
            self.deploy_calls.append((contract_type, params))
            await asyncio.sleep(self.deploy_delay)
            if contract_type in self.failing_types:
                raise ContractExecutionError(f"{contract_type.value} factory reverted")
            n = self._next()
            address = "0x" + format(n, "040x")
            self.store(contract_type, address)
            return DeployResult(address=address, tx_hash="0x" + format(n, "064x"))

        return deploy

    def deploy_functions(self):
        return {t: self.deploy_function(t) for t in ContractType}

    async def load_addresses(self, chain_id: int) -> Dict[str, Dict[str, str]]:
        await asyncio.sleep(0)
        return {
            context: dict(keys) if isinstance(keys, dict) else keys for context, keys in self.stored.items()
        }

    async def has_code(self, address: str) -> bool:
        await asyncio.sleep(0)
        return address in self.code

    async def send_action(self, action: PermissionAction) -> str:
        await asyncio.sleep(0)
        if action.function_name in self.failing_functions:
            raise ContractExecutionError(f"{action.function_name} reverted")
        self.sent_actions.append(action)
        return "0x" + format(self._next(), "064x")

    def deployed_types(self) -> List[ContractType]:
        return [t for t, _ in self.deploy_calls]


@pytest.fixture
def fake_chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def make_orchestrator(fake_chain: FakeChain) -> Callable[..., DeploymentOrchestrator]:
    """Factory building an orchestrator against fake_chain for a requirement list."""

    def factory(
        requirements: Sequence[ContractType],
        locks: Optional[DeploymentLocks] = None,
        controller_address: Optional[str] = CONTROLLER,
        **kwargs: Any,
    ) -> DeploymentOrchestrator:
        async def load_requirements() -> List[ContractType]:
            return list(requirements)

        async def get_controller_address() -> Optional[str]:
            return controller_address

        options: Dict[str, Any] = dict(
            registry=build_registry(fake_chain.deploy_functions()),
            load_requirements=load_requirements,
            load_addresses=fake_chain.load_addresses,
            has_code=fake_chain.has_code,
            send_action=fake_chain.send_action,
            get_controller_address=get_controller_address,
            default_chain_id=CHAIN_ID,
            locks=locks,
        )
        options.update(kwargs)
        return DeploymentOrchestrator(**options)

    return factory


@pytest.fixture
def temp_storage_dir(tmp_path: Path) -> Path:
    """Create a temporary storage directory for tests."""
    storage_dir = tmp_path / ".game-deployments"
    storage_dir.mkdir(parents=True, exist_ok=True)
    return storage_dir


@pytest.fixture
def write_requirements(temp_storage_dir: Path) -> Callable[[Any], Path]:
    """Write requirements.json with the given content into the temp storage dir."""

    def writer(content: Any) -> Path:
        path = temp_storage_dir / "requirements.json"
        if isinstance(content, str):
            path.write_text(content)
        else:
            with open(path, "w") as f:
                json.dump(content, f, indent=2)
        return path

    return writer
