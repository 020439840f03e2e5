"""Configuration constants for game-deployments library."""

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

DEFAULT_RPC_URL = "http://localhost:8545"

# Environment variables read by config.load_settings()
RPC_URL_ENV = "RPC_URL"
CHAIN_ID_ENV = "SDK_CHAIN_ID"
API_URL_ENV = "MANAGED_API_URL"
API_TOKEN_ENV = "MANAGED_API_TOKEN"
STORAGE_DIR_ENV = "GAME_DEPLOYMENTS_DIR"
PRIZE_MATCHES_PER_POOL_ENV = "GAME_PRIZE_MATCHES_PER_POOL"

# Factory address env var per contract type name, e.g. GAME_MATCH_FACTORY
FACTORY_ENV = {
    "Score": "GAME_SCORE_FACTORY",
    "Match": "GAME_MATCH_FACTORY",
    "Prize": "GAME_PRIZE_FACTORY",
    "EventBus": "GAME_EVENT_BUS_FACTORY",
    "League": "GAME_LEAGUE_FACTORY",
    "Tournament": "GAME_TOURNAMENT_FACTORY",
    "Prediction": "GAME_PREDICTION_FACTORY",
    "Heap": "GAME_HEAP_FACTORY",
}

# Where each contract type lives in contracts.json: (context, key)
STORAGE_SLOTS = {
    "Score": ("game", "score"),
    "Match": ("game", "match"),
    "Prize": ("game", "prize"),
    "EventBus": ("base", "eventBus"),
    "League": ("game", "league"),
    "Tournament": ("game", "tournament"),
    "Prediction": ("game", "prediction"),
    "Heap": ("game", "heap"),
}

# Managed deployment API endpoints
API_WALLET_PATH = "/v2/miniapp-controller/wallet"
API_DEPLOY_PATH = "/v2/miniapp-controller/deploy"
API_EXECUTE_PATH = "/v2/miniapp-controller/execute"
API_TRANSACTION_PATH = "/v2/miniapp-controller/transaction/{tx_hash}"
API_CONTRACTS_PATH = "/v2/miniapp-controller/contracts"

API_POLL_INTERVAL = 2.0  # seconds
API_POLL_TIMEOUT = 60.0  # seconds
HTTP_TIMEOUT = 30  # seconds, per request

RECEIPT_TIMEOUT = 120  # seconds

# EventBus event id for match results
EVENT_MATCH_RESULT = 1

# Share (basis points / weight) given to a Prize pool registered on Match
PRIZE_SHARE = 100
