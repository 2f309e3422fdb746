"""OKX earn adapter."""
from yield_data_agg.adapters.exchanges.okx.okx_adapter import OkxEarnAdapter

__all__ = ["OkxEarnAdapter"]
