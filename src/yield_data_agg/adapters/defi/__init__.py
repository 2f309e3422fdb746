"""DeFi protocol adapters."""
from yield_data_agg.adapters.defi.defillama import DefiLlamaAdapter

__all__ = ["DefiLlamaAdapter"]
