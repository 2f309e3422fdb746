"""Binance earn adapter."""
from yield_data_agg.adapters.exchanges.binance.binance_adapter import \
    BinanceEarnAdapter

__all__ = ["BinanceEarnAdapter"]
