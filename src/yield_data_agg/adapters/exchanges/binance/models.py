"""Models for the Binance staking adapter (API params and payload)."""
from pydantic import BaseModel


class BinanceProductListParams(BaseModel):
    """Params for /sapi/v1/staking/productList. Timestamp and signature are added at call site."""

    product: str = "STAKING"
    status: str = "ALL"


class BinanceStakingProduct(BaseModel):
    """One product from the staking product list (only the fields we read)."""

    projectId: str | None = None
    productId: str | None = None
    asset: str
    duration: int = 0
    apr: str | None = None
    deliveryAnnualInterestRate: str | None = None
    status: str = ""

    model_config = {"extra": "ignore"}
