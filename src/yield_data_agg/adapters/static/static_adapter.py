"""Adapter serving bundled sample rates for one platform."""
from yield_data_agg.adapters.core import YieldAdapterABC
from yield_data_agg.adapters.static.sample_data import SAMPLE_ROWS
from yield_data_agg.schemas import Opportunity
from yield_data_agg.utils import utcnow


def sample_opportunities(platform: str | None = None) -> list[Opportunity]:
    """Sample opportunities stamped with the current time, optionally for one platform."""
    now = utcnow()
    return [
        Opportunity(**row, last_updated=now)
        for row in SAMPLE_ROWS
        if platform is None or row["platform"].lower() == platform.lower()
    ]


class StaticYieldAdapter(YieldAdapterABC):
    """Serves the bundled sample rates for a single platform.

    Used when live exchange fetching is disabled or credentials are missing,
    so the rest of the pipeline still has data to work with.
    """

    def __init__(self, platform: str, label: str | None = None) -> None:
        self.platform = platform
        self.name = label or f"{platform} (sample)"

    async def fetch_opportunities(self) -> list[Opportunity]:
        return sample_opportunities(self.platform)
