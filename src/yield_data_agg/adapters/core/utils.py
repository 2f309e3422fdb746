"""Shared utilities for yield adapters."""

DECIMALS = 4

# Wrapped and liquid-staking tickers folded onto their underlying asset.
_ASSET_ALIASES = {
    "WBTC": "BTC",
    "WETH": "ETH",
    "BETH": "ETH",
    "STETH": "ETH",
}

_CHAIN_BY_ASSET = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "BNB": "bsc",
    "SOL": "solana",
    "MATIC": "polygon",
    "AVAX": "avalanche",
    "ADA": "cardano",
    "DOT": "polkadot",
    "ATOM": "cosmos",
    "XRP": "ripple",
    "DOGE": "dogecoin",
    "TRX": "tron",
    "TON": "ton",
    "USDT": "ethereum",
    "USDC": "ethereum",
}

FLEXIBLE = "Flexible"


def normalize_asset(symbol: str) -> str:
    """Uppercase a ticker and fold wrapped/staked variants onto the underlying asset."""
    upper = symbol.strip().upper()
    return _ASSET_ALIASES.get(upper, upper)


def chain_for_asset(asset: str) -> str:
    """Native chain for an asset; ethereum when unknown."""
    return _CHAIN_BY_ASSET.get(asset.upper(), "ethereum")


def round_rate(x: float | None) -> float | None:
    """Round a percentage to 4 decimal places; preserve None."""
    if x is None:
        return None
    return round(float(x), DECIMALS)


def pct_from_fraction(raw: str | float | None) -> float:
    """Convert an API rate given as a fraction ("0.052") to a percentage (5.2)."""
    if raw in (None, ""):
        return 0.0
    return round_rate(float(raw) * 100)
