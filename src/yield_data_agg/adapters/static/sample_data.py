"""Bundled sample rates served when live exchange fetching is disabled."""
from yield_data_agg.db import PlatformType, RiskLevel

# (platform, platform_type, asset, symbol, chain, apr, apy, lock_period, min_stake, risk, source)
_ROWS = [
    ("Binance", PlatformType.EXCHANGE, "BTC", "BTC", "bitcoin", 1.2, 1.21, "Flexible", 0.0001, RiskLevel.LOW, "Binance Simple Earn"),
    ("Binance", PlatformType.EXCHANGE, "ETH", "ETH", "ethereum", 2.8, 2.84, "Flexible", 0.001, RiskLevel.LOW, "Binance Simple Earn"),
    ("Binance", PlatformType.EXCHANGE, "USDT", "USDT", "ethereum", 6.5, 6.71, "30 Days", 10, RiskLevel.LOW, "Binance Simple Earn"),
    ("OKX", PlatformType.EXCHANGE, "BTC", "BTC", "bitcoin", 1.5, 1.51, "Flexible", 0.0001, RiskLevel.LOW, "OKX Earn"),
    ("OKX", PlatformType.EXCHANGE, "SOL", "SOL", "solana", 6.9, 7.14, "Flexible", 0.1, RiskLevel.LOW, "OKX Earn"),
    ("OKX", PlatformType.EXCHANGE, "USDC", "USDC", "ethereum", 5.1, 5.23, "Flexible", 1, RiskLevel.LOW, "OKX Earn"),
    ("KuCoin", PlatformType.EXCHANGE, "ETH", "ETH", "ethereum", 3.1, 3.15, "Flexible", 0.01, RiskLevel.LOW, "KuCoin Earn"),
    ("KuCoin", PlatformType.EXCHANGE, "DOT", "DOT", "polkadot", 12.4, 13.2, "28 Days", 1, RiskLevel.MEDIUM, "KuCoin Earn"),
    ("Kraken", PlatformType.EXCHANGE, "ADA", "ADA", "cardano", 2.4, 2.43, "Flexible", 1, RiskLevel.LOW, "Kraken Staking"),
    ("Kraken", PlatformType.EXCHANGE, "ATOM", "ATOM", "cosmos", 14.0, 15.0, "Flexible", 0.1, RiskLevel.MEDIUM, "Kraken Staking"),
    ("Aave", PlatformType.DEFI, "USDC", "USDC", "ethereum", 4.6, 4.7, None, None, RiskLevel.LOW, "Aave v3"),
    ("Aave", PlatformType.DEFI, "ETH", "WETH", "ethereum", 1.9, 1.92, None, None, RiskLevel.LOW, "Aave v3"),
    ("Yearn", PlatformType.DEFI, "USDT", "USDT", "ethereum", 7.3, 7.57, None, None, RiskLevel.MEDIUM, "Yearn Vaults"),
    ("Yearn", PlatformType.DEFI, "ETH", "STETH", "ethereum", 3.4, 3.46, None, None, RiskLevel.MEDIUM, "Yearn Vaults"),
]

SAMPLE_ROWS: list[dict] = [
    {
        "id": f"{platform.lower()}-{symbol.lower()}-{(lock or 'flex').replace(' ', '').lower()}",
        "platform": platform,
        "platform_type": platform_type,
        "asset": asset,
        "symbol": symbol,
        "chain": chain,
        "apr": apr,
        "apy": apy,
        "lock_period": lock,
        "min_stake": min_stake,
        "risk_level": risk,
        "source": source,
    }
    for (platform, platform_type, asset, symbol, chain, apr, apy, lock, min_stake, risk, source) in _ROWS
]

SAMPLE_PLATFORMS: tuple[str, ...] = tuple(dict.fromkeys(row["platform"] for row in SAMPLE_ROWS))
