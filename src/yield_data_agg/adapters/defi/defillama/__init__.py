"""DefiLlama yields adapter."""
from yield_data_agg.adapters.defi.defillama.defillama_adapter import (
    DEFAULT_PROJECTS, DefiLlamaAdapter)

__all__ = ["DEFAULT_PROJECTS", "DefiLlamaAdapter"]
