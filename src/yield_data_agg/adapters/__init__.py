"""Yield data adapters for exchanges and DeFi protocols.

Every adapter implements YieldAdapterABC and returns normalized
Opportunity records:

- BinanceEarnAdapter: Binance staking products (signed SAPI call)
- OkxEarnAdapter: OKX staking/DeFi offers (signed v5 call)
- DefiLlamaAdapter: Aave/Yearn pools via the DefiLlama yields API
- StaticYieldAdapter: bundled sample rates for one platform

Example:
    async with DefiLlamaAdapter() as adapter:
        for item in await adapter.fetch_opportunities():
            print(f"{item.platform} {item.symbol}: {item.apr}%")
"""
from yield_data_agg.adapters.core import YieldAdapterABC
from yield_data_agg.adapters.defi import DefiLlamaAdapter
from yield_data_agg.adapters.exchanges import BinanceEarnAdapter, OkxEarnAdapter
from yield_data_agg.adapters.factory import create_adapters
from yield_data_agg.adapters.static import (StaticYieldAdapter,
                                            sample_opportunities)

__all__ = [
    "BinanceEarnAdapter",
    "DefiLlamaAdapter",
    "OkxEarnAdapter",
    "StaticYieldAdapter",
    "YieldAdapterABC",
    "create_adapters",
    "sample_opportunities",
]
