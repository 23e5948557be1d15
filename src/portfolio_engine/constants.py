"""Upstream endpoints, contract addresses and reference token data."""

from typing import TypedDict


class TokenInfo(TypedDict):
    symbol: str
    name: str
    decimals: int


# --- upstream endpoints ---
APTOS_FULLNODE_URL = "https://fullnode.mainnet.aptoslabs.com/v1"
APTOS_INDEXER_URL = "https://indexer.mainnet.aptoslabs.com/v1/graphql"
PANORA_API_URL = "https://api.panora.exchange"
HYPERION_API_URL = "https://api.hyperion.xyz/v1/graphql"
YIELD_MARKETS_URL = "https://yield-a.vercel.app/api/aptos/markets"
HYPERION_POOLS_URL = "https://yield-a.vercel.app/api/hyperion/pools"
TAPP_API_URL = "https://api.tapp.exchange/api/v1"
AMNIS_STAKE_INFO_URL = "https://api.amnis.finance/api/v1/stake/info"
ECHELON_MARKETS_URL = "https://app.echelon.market/api/markets?network=aptos_mainnet"

# Panora expects a recipient even for previews
PLACEHOLDER_WALLET_ADDRESS = "0x" + "0" * 64
PANORA_CHAIN_ID = "1"

DEFAULT_SOURCE_HEADERS: dict[str, str] = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json",
}

# --- protocol contracts ---
AAVE_POOL_DATA_PROVIDER = (
    "0x39ddcd9e1a39fa14f25e3f9ec8a86074d05cc0881cbf667df8a6ee70942016fb"
)
AMNIS_PACKAGE = "0x111ae3e5bc816a5e63c2da97d0aa3886519e0cd5e4b046659fa35796bd11542a"
ECHELON_PACKAGE = "0x8f396e4246b2ba87b51c0739ef5ea4f26515a98375308c31ac2ec1e42142a57f"

# --- tokens ---
APT_COIN = "0x1::aptos_coin::AptosCoin"
STAPT_COIN = f"{AMNIS_PACKAGE}::stapt_token::StakedApt"
AMAPT_COIN = f"{AMNIS_PACKAGE}::amapt_token::AmnisApt"
STKAPT_FA = "0x42556039b88593e768c97ab1a3ab0c6a17230825769304482dff8fdebe4c002b"

# Keyed by asset type (coin type or fungible-asset metadata address)
KNOWN_TOKENS: dict[str, TokenInfo] = {
    APT_COIN: {"symbol": "APT", "name": "Aptos Coin", "decimals": 8},
    "0xa": {"symbol": "APT", "name": "Aptos Coin", "decimals": 8},
    STAPT_COIN: {"symbol": "stAPT", "name": "Staked Aptos Coin", "decimals": 8},
    AMAPT_COIN: {"symbol": "amAPT", "name": "Amnis Aptos Coin", "decimals": 8},
    "0x50788befc1107c0cc4473848a92e5c783c635866ce3c98de71d2eeb7d2a34f85::aptos_coin::AptosCoin": {
        "symbol": "amAPT",
        "name": "Amnis Aptos Coin",
        "decimals": 8,
    },
    "0xbae207659db88bea0cbead6da0ed00aac12edcdda169e591cd41c94180b46f3b": {
        "symbol": "USDC",
        "name": "USD Coin",
        "decimals": 6,
    },
    "0x357b0b74bc833e95a115ad22604854d6b0fca151cecd94111770e5d6ffc9dc2b": {
        "symbol": "USDt",
        "name": "Tether USD",
        "decimals": 6,
    },
    STKAPT_FA: {"symbol": "stkAPT", "name": "Kofi Staked APT", "decimals": 8},
}

# --- math ---
RAY = 10**27
SECONDS_PER_YEAR = 31_536_000

# --- pool filters ---
MIN_DAILY_VOLUME_USD = 1000.0

# Amnis stake bounds in octas (1 APT minimum, no practical maximum)
AMNIS_MIN_STAKE = "1000000"
AMNIS_MAX_STAKE = "1000000000000"
