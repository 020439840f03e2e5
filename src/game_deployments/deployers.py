"""
Per-type deploy functions.

Every contract type is created through its factory, either directly with a
signed transaction from the controller account or through the managed
deployment API. Both paths write the new address into AddressStorage.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .abis import get_abi
from .api_client import TX_FAILED, ManagedDeploymentClient
from .config import Settings
from .constants import ZERO_ADDRESS
from .exceptions import ContractExecutionError, StorageError
from .rpc import get_chain_id
from .storage import AddressStorage
from .transactions import TransactionSender, extract_deployed_address
from .types import ContractType, DeployResult

logger = logging.getLogger(__name__)

DeployParams = Dict[str, Any]
DeployFunction = Callable[[DeployParams], Awaitable[DeployResult]]


def _address(params: DeployParams, key: str) -> str:
    return params.get(key) or ZERO_ADDRESS


@dataclass(frozen=True)
class FactorySpec:
    """How to call one contract type's factory."""

    factory_type: str  # managed API factoryType and ABI reference
    call: Callable[[DeployParams], Tuple[str, List[Any]]]  # params -> (function, args)
    api_params: Callable[[DeployParams], Dict[str, Any]] = lambda params: {}


def _prize_call(params: DeployParams) -> Tuple[str, List[Any]]:
    matches_per_pool = params.get("matches_per_pool")
    if matches_per_pool:
        return "deployPrizeWithConfig", [_address(params, "match_address"), int(matches_per_pool)]
    return "deployPrize", [_address(params, "match_address")]


FACTORY_SPECS: Dict[ContractType, FactorySpec] = {
    ContractType.SCORE: FactorySpec("ScoreFactory", lambda p: ("deployScore", [])),
    ContractType.MATCH: FactorySpec(
        "MatchFactory",
        lambda p: ("deployMatch", [_address(p, "score_address")]),
        lambda p: {"scoreAddress": p.get("score_address")},
    ),
    ContractType.PRIZE: FactorySpec(
        "PrizeFactory",
        _prize_call,
        lambda p: {"matchAddress": p.get("match_address"), "matchesPerPool": p.get("matches_per_pool")},
    ),
    ContractType.EVENT_BUS: FactorySpec("EventBusFactory", lambda p: ("deployEventBus", [])),
    ContractType.LEAGUE: FactorySpec(
        "LeagueFactory",
        lambda p: ("deployLeague", [_address(p, "match_address")]),
        lambda p: {"matchAddress": p.get("match_address")},
    ),
    ContractType.TOURNAMENT: FactorySpec(
        "TournamentFactory",
        lambda p: ("deployTournament", [_address(p, "score_address")]),
        lambda p: {"scoreAddress": p.get("score_address")},
    ),
    ContractType.PREDICTION: FactorySpec(
        "PredictionFactory",
        lambda p: (
            "deployPrediction",
            [
                _address(p, "match_address"),
                _address(p, "tournament_address"),
                _address(p, "league_address"),
            ],
        ),
        lambda p: {
            "matchAddress": p.get("match_address"),
            "tournamentAddress": p.get("tournament_address"),
            "leagueAddress": p.get("league_address"),
        },
    ),
    ContractType.HEAP: FactorySpec(
        "HeapFactory",
        lambda p: ("deployHeap", [_address(p, "score_address")]),
        lambda p: {"scoreAddress": p.get("score_address")},
    ),
}


class Deployer:
    """Base class: create a contract, then record its address in storage."""

    def __init__(self, address_storage: AddressStorage):
        self.address_storage = address_storage

    def chain_id(self) -> int:
        raise NotImplementedError

    def create(self, contract_type: ContractType, params: DeployParams) -> DeployResult:
        raise NotImplementedError

    def deploy(self, contract_type: ContractType, params: DeployParams) -> DeployResult:
        """
        Deploy one contract and persist its address.

        A failure to persist the address is logged; the deployment still counts.
        """
        result = self.create(contract_type, params)
        logger.info("Deployed %s at %s (tx %s)", contract_type.value, result.address, result.tx_hash)

        try:
            self.address_storage.set_contract_address(self.chain_id(), contract_type, result.address)
        except StorageError as e:
            logger.error("Failed to save %s address to storage: %s", contract_type.value, e)

        return result

    def deploy_function(self, contract_type: ContractType) -> DeployFunction:
        """Async deploy callable for the registry, running the blocking work in a thread."""

        async def deploy(params: DeployParams) -> DeployResult:
            return await asyncio.to_thread(self.deploy, contract_type, params)

        return deploy


class DirectDeployer(Deployer):
    """Calls factories with signed transactions from the controller account."""

    def __init__(self, settings: Settings, sender: TransactionSender, address_storage: AddressStorage):
        super().__init__(address_storage)
        self.settings = settings
        self.sender = sender

    def chain_id(self) -> int:
        return self.sender.web3.eth.chain_id

    def create(self, contract_type: ContractType, params: DeployParams) -> DeployResult:
        factory = FACTORY_SPECS[contract_type]
        factory_address = self.settings.factory_address(contract_type)
        function_name, args = factory.call(params)

        tx_hash, receipt = self.sender.write_contract(
            factory_address, get_abi(factory.factory_type), function_name, args
        )

        address = extract_deployed_address(receipt, factory_address)
        if not address:
            raise ContractExecutionError(
                "Could not extract deployed address from transaction receipt", tx_hash=tx_hash
            )
        return DeployResult(address=address, tx_hash=tx_hash)


class ManagedDeployer(Deployer):
    """Deploys through the managed deployment API."""

    def __init__(
        self,
        client: ManagedDeploymentClient,
        rpc_url: str,
        address_storage: AddressStorage,
    ):
        super().__init__(address_storage)
        self.client = client
        self.rpc_url = rpc_url
        self._chain_id: Optional[int] = None

    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = get_chain_id(self.rpc_url)
        return self._chain_id

    def create(self, contract_type: ContractType, params: DeployParams) -> DeployResult:
        factory = FACTORY_SPECS[contract_type]
        api_params = {
            # zero address means "not linked" for the API as well
            k: v for k, v in factory.api_params(params).items() if v and v != ZERO_ADDRESS
        }

        data = self.client.deploy_contract(factory.factory_type, self.chain_id(), **api_params)
        tx_hash = data["txHash"]
        logger.debug("Managed deployment of %s submitted: %s", contract_type.value, data)

        status = self.client.wait_for_transaction(tx_hash)
        if status.get("status") == TX_FAILED:
            raise ContractExecutionError(
                f"Deployment failed: {status.get('errorMessage') or 'Unknown error'}",
                tx_hash=tx_hash,
            )
        return DeployResult(address=data["contractAddress"], tx_hash=tx_hash)
