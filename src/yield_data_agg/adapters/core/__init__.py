"""Core adapter abstractions."""
from yield_data_agg.adapters.core.adapter_abc import YieldAdapterABC
from yield_data_agg.adapters.core.utils import (FLEXIBLE, chain_for_asset,
                                                normalize_asset,
                                                pct_from_fraction, round_rate)

__all__ = [
    "FLEXIBLE",
    "YieldAdapterABC",
    "chain_for_asset",
    "normalize_asset",
    "pct_from_fraction",
    "round_rate",
]
