"""Abstract base class for yield data adapters."""
from abc import ABC, abstractmethod

from yield_data_agg.schemas import Opportunity


class YieldAdapterABC(ABC):
    """Base interface for every yield source (exchange earn API, DeFi protocol, static data).

    Each adapter fetches its raw listings and normalizes them into
    Opportunity records. Adapters may raise on network or auth failure;
    the aggregation registry treats any exception as zero results.
    """

    #: Human-readable label used in logs, e.g. "Binance Simple Earn".
    name: str = "adapter"

    @abstractmethod
    async def fetch_opportunities(self) -> list[Opportunity]:
        """Fetch the current yield offers from this source.

        Returns:
            Normalized opportunities; empty when the source lists nothing.
        """

    async def close(self) -> None:
        """Clean up resources (HTTP clients).

        Override in subclasses if cleanup is needed.
        """

    async def __aenter__(self) -> "YieldAdapterABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
