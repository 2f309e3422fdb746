"""OKX Earn (staking / DeFi offers) adapter."""
import base64
import hashlib
import hmac
from datetime import datetime, timezone

import httpx

from yield_data_agg.adapters.core import (FLEXIBLE, YieldAdapterABC,
                                          chain_for_asset, normalize_asset,
                                          pct_from_fraction)
from yield_data_agg.adapters.exchanges.okx.models import (OkxResponse,
                                                          OkxStakingOffer)
from yield_data_agg.db import PlatformType, RiskLevel
from yield_data_agg.errors import AdapterUnavailable
from yield_data_agg.schemas import Opportunity
from yield_data_agg.utils import utcnow


class OkxEarnAdapter(YieldAdapterABC):
    """Yield offers from the authenticated OKX staking/DeFi offers endpoint.

    OKX signs base64(HMAC-SHA256(secret, timestamp + method + path + body)).
    """

    BASE_URL = "https://www.okx.com"
    OFFERS_PATH = "/api/v5/finance/staking-defi/offers"
    name = "OKX Earn"

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        passphrase: str,
        *,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_secret = api_secret
        self._passphrase = passphrase
        self._client = client or httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )

    def _auth_headers(self, method: str, path: str, body: str = "") -> dict[str, str]:
        timestamp = (
            datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        )
        message = f"{timestamp}{method}{path}{body}"
        signature = base64.b64encode(
            hmac.new(self._api_secret.encode(), message.encode(), hashlib.sha256).digest()
        ).decode()
        return {
            "OK-ACCESS-KEY": self._api_key,
            "OK-ACCESS-SIGN": signature,
            "OK-ACCESS-TIMESTAMP": timestamp,
            "OK-ACCESS-PASSPHRASE": self._passphrase,
        }

    async def fetch_opportunities(self) -> list[Opportunity]:
        response = await self._client.get(
            self.OFFERS_PATH, headers=self._auth_headers("GET", self.OFFERS_PATH)
        )
        response.raise_for_status()
        payload = OkxResponse.model_validate(response.json())
        if payload.code != "0":
            raise AdapterUnavailable(self.name, f"code {payload.code}: {payload.msg}")

        now = utcnow()
        out: list[Opportunity] = []
        for offer in payload.data:
            opportunity = self._opportunity_from_offer(offer, now)
            if opportunity is not None:
                out.append(opportunity)
        return out

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def _opportunity_from_offer(
        self, offer: OkxStakingOffer, now: datetime
    ) -> Opportunity | None:
        if not offer.ccy:
            return None
        apr = pct_from_fraction(offer.apy or offer.rate)
        if apr <= 0:
            return None
        symbol = offer.ccy.upper()
        asset = normalize_asset(symbol)
        lock_period = FLEXIBLE if offer.term in ("", "0") else f"{offer.term} days"
        return Opportunity(
            id=f"okx-{offer.product_id or symbol}",
            platform="OKX",
            asset=asset,
            symbol=symbol,
            platform_type=PlatformType.EXCHANGE,
            chain=chain_for_asset(asset),
            apr=apr,
            apy=apr,
            lock_period=lock_period,
            min_stake=float(offer.min_amount) if offer.min_amount else None,
            risk_level=RiskLevel.LOW,
            source="okx_earn",
            last_updated=now,
        )
