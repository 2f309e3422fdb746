"""Models for the OKX earn adapter (API payloads)."""
from pydantic import BaseModel, Field


class OkxStakingOffer(BaseModel):
    """One offer from /api/v5/finance/staking-defi/offers (only the fields we read)."""

    ccy: str = ""
    product_id: str | None = Field(default=None, alias="productId")
    protocol: str | None = None
    protocol_type: str | None = Field(default=None, alias="protocolType")
    term: str = "0"
    apy: str | None = None
    rate: str | None = None
    min_amount: str | None = Field(default=None, alias="minAmt")
    state: str | None = None

    model_config = {"extra": "ignore", "populate_by_name": True}


class OkxResponse(BaseModel):
    """OKX v5 envelope: code "0" means success."""

    code: str
    msg: str = ""
    data: list[OkxStakingOffer] = Field(default_factory=list)
