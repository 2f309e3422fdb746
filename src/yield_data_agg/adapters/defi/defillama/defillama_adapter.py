"""DeFi protocol yields via the public DefiLlama yields API."""
from datetime import datetime

import httpx

from yield_data_agg.adapters.core import (YieldAdapterABC, normalize_asset,
                                          round_rate)
from yield_data_agg.adapters.defi.defillama.models import (
    DefiLlamaPool, DefiLlamaPoolsResponse)
from yield_data_agg.db import PlatformType, RiskLevel
from yield_data_agg.schemas import Opportunity
from yield_data_agg.utils import utcnow

# DefiLlama project slug -> platform name used across the service
DEFAULT_PROJECTS: dict[str, str] = {
    "aave-v3": "Aave",
    "yearn-finance": "Yearn",
}


class DefiLlamaAdapter(YieldAdapterABC):
    """Lending/vault yields for selected DeFi projects.

    One request returns every pool DefiLlama tracks; pools are filtered on the
    client by project and a minimum TVL to keep the listing meaningful.
    """

    POOLS_URL = "https://yields.llama.fi/pools"
    name = "DefiLlama"

    def __init__(
        self,
        projects: dict[str, str] | None = None,
        *,
        min_tvl_usd: float = 1_000_000.0,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._projects = projects or DEFAULT_PROJECTS
        self._min_tvl_usd = min_tvl_usd
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch_opportunities(self) -> list[Opportunity]:
        response = await self._client.get(self.POOLS_URL)
        response.raise_for_status()
        payload = DefiLlamaPoolsResponse.model_validate(response.json())
        now = utcnow()
        return [
            self._opportunity_from_pool(pool, now)
            for pool in payload.data
            if pool.project in self._projects
            and pool.tvl_usd >= self._min_tvl_usd
            and (pool.apy_base is not None or pool.apy is not None)
        ]

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def _opportunity_from_pool(self, pool: DefiLlamaPool, now: datetime) -> Opportunity:
        symbol = pool.symbol.upper()
        # Multi-asset pools ("USDC-WETH") are keyed on their first leg.
        asset = normalize_asset(symbol.split("-")[0])
        apr = pool.apy_base if pool.apy_base is not None else pool.apy
        if pool.stablecoin and pool.il_risk != "yes":
            risk = RiskLevel.LOW
        elif pool.il_risk == "yes":
            risk = RiskLevel.HIGH
        else:
            risk = RiskLevel.MEDIUM
        return Opportunity(
            id=f"defillama-{pool.pool}",
            platform=self._projects[pool.project],
            asset=asset,
            symbol=symbol,
            platform_type=PlatformType.DEFI,
            chain=pool.chain.lower(),
            apr=round_rate(apr),
            apy=round_rate(pool.apy),
            risk_level=risk,
            source=f"defillama:{pool.project}",
            last_updated=now,
        )
