"""Static sample-data adapter."""
from yield_data_agg.adapters.static.sample_data import SAMPLE_PLATFORMS
from yield_data_agg.adapters.static.static_adapter import (StaticYieldAdapter,
                                                          sample_opportunities)

__all__ = ["SAMPLE_PLATFORMS", "StaticYieldAdapter", "sample_opportunities"]
