"""Models for the DefiLlama yields adapter."""
from pydantic import BaseModel, Field


class DefiLlamaPool(BaseModel):
    """One pool from https://yields.llama.fi/pools (only the fields we read)."""

    pool: str
    project: str
    chain: str = ""
    symbol: str = ""
    tvl_usd: float = Field(default=0.0, alias="tvlUsd")
    apy: float | None = None
    apy_base: float | None = Field(default=None, alias="apyBase")
    stablecoin: bool = False
    il_risk: str | None = Field(default=None, alias="ilRisk")

    model_config = {"extra": "ignore", "populate_by_name": True}


class DefiLlamaPoolsResponse(BaseModel):
    status: str = "success"
    data: list[DefiLlamaPool] = Field(default_factory=list)
