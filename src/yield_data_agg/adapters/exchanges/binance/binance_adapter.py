"""Binance Simple Earn / staking adapter."""
import hashlib
import hmac
import time
from datetime import datetime
from urllib.parse import urlencode

import httpx

from yield_data_agg.adapters.core import (FLEXIBLE, YieldAdapterABC,
                                          normalize_asset, pct_from_fraction)
from yield_data_agg.adapters.exchanges.binance.models import (
    BinanceProductListParams, BinanceStakingProduct)
from yield_data_agg.db import PlatformType, RiskLevel
from yield_data_agg.schemas import Opportunity
from yield_data_agg.utils import utcnow


class BinanceEarnAdapter(YieldAdapterABC):
    """Yield offers from the Binance staking product list.

    The endpoint is a signed SAPI call: the query string is signed with
    HMAC-SHA256 (hex) using the API secret and the key goes in X-MBX-APIKEY.
    """

    BASE_URL = "https://api.binance.com"
    name = "Binance Simple Earn"

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        *,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Binance adapter.

        Args:
            api_key: Binance API key.
            api_secret: Binance API secret used for request signing.
            timeout: Per-request timeout in seconds.
            client: Optional preconfigured client (tests inject a MockTransport).
        """
        self._api_key = api_key
        self._api_secret = api_secret
        self._client = client or httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"X-MBX-APIKEY": api_key},
            timeout=timeout,
        )

    def _signed_query(self, params: dict) -> str:
        query = urlencode(params | {"timestamp": int(time.time() * 1000)})
        signature = hmac.new(
            self._api_secret.encode(), query.encode(), hashlib.sha256
        ).hexdigest()
        return f"{query}&signature={signature}"

    async def fetch_opportunities(self) -> list[Opportunity]:
        query = self._signed_query(BinanceProductListParams().model_dump())
        response = await self._client.get(f"/sapi/v1/staking/productList?{query}")
        response.raise_for_status()
        products = [BinanceStakingProduct.model_validate(p) for p in response.json()]
        now = utcnow()
        return [
            self._opportunity_from_product(p, now)
            for p in products
            if p.status == "SUBSCRIBABLE"
        ]

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def _opportunity_from_product(self, product: BinanceStakingProduct, now: datetime) -> Opportunity:
        symbol = product.asset.upper()
        asset = normalize_asset(symbol)
        return Opportunity(
            id=f"binance-{product.projectId or product.productId}",
            platform="Binance",
            asset=asset,
            symbol=symbol,
            platform_type=PlatformType.EXCHANGE,
            chain="bsc",
            apr=pct_from_fraction(product.apr or product.deliveryAnnualInterestRate),
            apy=pct_from_fraction(product.deliveryAnnualInterestRate or product.apr),
            lock_period=f"{product.duration} Days" if product.duration > 0 else FLEXIBLE,
            risk_level=RiskLevel.MEDIUM if product.duration > 30 else RiskLevel.LOW,
            source=self.name,
            last_updated=now,
        )
