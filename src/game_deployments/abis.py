"""
ABI fragments for the game contracts and their factories.

Only the functions used for deployment and permission wiring are listed.
Each factory emits an instance-created event whose first indexed topic is
the new contract address (see transactions.extract_deployed_address).
"""

from typing import Any, Dict, List, Sequence, Tuple


def _function(
    name: str,
    inputs: Sequence[Tuple[str, str]],
    outputs: Sequence[Tuple[str, str]] = (),
    state_mutability: str = "nonpayable",
) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
        "stateMutability": state_mutability,
    }


def _instance_event(name: str) -> Dict[str, Any]:
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": [
            {"name": "instance", "type": "address", "indexed": True},
            {"name": "owner", "type": "address", "indexed": True},
        ],
    }


SCORE_ABI = [
    _function("setRecorderAuthorization", [("recorder", "address"), ("authorized", "bool")]),
    _function("setPrize", [("prize", "address")]),
    _function("authorizedRecorders", [("", "address")], [("", "bool")], "view"),
]

MATCH_ABI = [
    _function("registerShareRecipient", [("recipient", "address"), ("shareBasisPoints", "uint256")]),
    _function("configureFees", [("recipients", "address[]"), ("shares", "uint256[]")]),
]

PRIZE_ABI = [
    _function("setRecorderAuthorization", [("recorder", "address"), ("authorized", "bool")]),
]

EVENT_BUS_ABI = [
    _function("setEmitterAuthorization", [("emitter", "address"), ("authorized", "bool")]),
    _function("registerListener", [("eventType", "uint8"), ("listener", "address")]),
]

SCORE_FACTORY_ABI = [
    _function("deployScore", [], [("instance", "address")]),
    _instance_event("ScoreDeployed"),
]

MATCH_FACTORY_ABI = [
    _function("deployMatch", [("gameScore", "address")], [("instance", "address")]),
    _instance_event("MatchDeployed"),
]

PRIZE_FACTORY_ABI = [
    _function("deployPrize", [("gameMatch", "address")], [("instance", "address")]),
    _function(
        "deployPrizeWithConfig",
        [("gameMatch", "address"), ("matchesPerPool", "uint256")],
        [("instance", "address")],
    ),
    _instance_event("PrizeDeployed"),
]

EVENT_BUS_FACTORY_ABI = [
    _function("deployEventBus", [], [("instance", "address")]),
    _instance_event("EventBusDeployed"),
]

LEAGUE_FACTORY_ABI = [
    _function("deployLeague", [("gameMatch", "address")], [("instance", "address")]),
    _instance_event("LeagueDeployed"),
]

TOURNAMENT_FACTORY_ABI = [
    _function("deployTournament", [("gameScore", "address")], [("instance", "address")]),
    _instance_event("TournamentDeployed"),
]

PREDICTION_FACTORY_ABI = [
    _function(
        "deployPrediction",
        [("gameMatch", "address"), ("tournament", "address"), ("league", "address")],
        [("instance", "address")],
    ),
    _instance_event("PredictionDeployed"),
]

HEAP_FACTORY_ABI = [
    _function("deployHeap", [("gameScore", "address")], [("instance", "address")]),
    _instance_event("HeapDeployed"),
]

ABIS: Dict[str, List[Dict[str, Any]]] = {
    "Score": SCORE_ABI,
    "Match": MATCH_ABI,
    "Prize": PRIZE_ABI,
    "EventBus": EVENT_BUS_ABI,
    "ScoreFactory": SCORE_FACTORY_ABI,
    "MatchFactory": MATCH_FACTORY_ABI,
    "PrizeFactory": PRIZE_FACTORY_ABI,
    "EventBusFactory": EVENT_BUS_FACTORY_ABI,
    "LeagueFactory": LEAGUE_FACTORY_ABI,
    "TournamentFactory": TOURNAMENT_FACTORY_ABI,
    "PredictionFactory": PREDICTION_FACTORY_ABI,
    "HeapFactory": HEAP_FACTORY_ABI,
}


def get_abi(abi_ref: str) -> List[Dict[str, Any]]:
    """
    Look up an ABI by reference name.

    Raises:
        KeyError: If the reference is unknown
    """
    try:
        return ABIS[abi_ref]
    except KeyError:
        raise KeyError(f"Unknown ABI reference: {abi_ref!r}") from None
