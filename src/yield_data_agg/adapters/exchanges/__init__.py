"""Centralized exchange earn/staking adapters."""
from yield_data_agg.adapters.exchanges.binance import BinanceEarnAdapter
from yield_data_agg.adapters.exchanges.okx import OkxEarnAdapter

__all__ = ["BinanceEarnAdapter", "OkxEarnAdapter"]
