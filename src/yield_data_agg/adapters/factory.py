"""Factory building the configured adapter list."""
import logging

from yield_data_agg.adapters.core import YieldAdapterABC
from yield_data_agg.adapters.defi import DefiLlamaAdapter
from yield_data_agg.adapters.exchanges import BinanceEarnAdapter, OkxEarnAdapter
from yield_data_agg.adapters.static import SAMPLE_PLATFORMS, StaticYieldAdapter
from yield_data_agg.config import Settings

logger = logging.getLogger(__name__)


def create_adapters(settings: Settings) -> list[YieldAdapterABC]:
    """Create one adapter per yield source.

    With live fetching disabled every platform is served from sample data.
    With it enabled, exchanges with credentials get their live adapter and the
    rest keep sample data; DeFi protocols are read from DefiLlama.

    Args:
        settings: Service settings (credentials, timeouts, live-fetch flag).

    Returns:
        Adapters in registry order.
    """
    if not settings.live_exchange_fetch:
        return [StaticYieldAdapter(platform) for platform in SAMPLE_PLATFORMS]

    timeout = settings.adapter_timeout_seconds
    adapters: list[YieldAdapterABC] = []
    if settings.has_binance_credentials:
        adapters.append(
            BinanceEarnAdapter(
                settings.binance_api_key, settings.binance_api_secret, timeout=timeout
            )
        )
    else:
        logger.info("Binance credentials not configured, using sample data")
        adapters.append(StaticYieldAdapter("Binance"))
    if settings.has_okx_credentials:
        adapters.append(
            OkxEarnAdapter(
                settings.okx_api_key,
                settings.okx_api_secret,
                settings.okx_passphrase,
                timeout=timeout,
            )
        )
    else:
        logger.info("OKX credentials not configured, using sample data")
        adapters.append(StaticYieldAdapter("OKX"))
    adapters.append(StaticYieldAdapter("KuCoin"))
    adapters.append(StaticYieldAdapter("Kraken"))
    adapters.append(
        DefiLlamaAdapter(min_tvl_usd=settings.defillama_min_tvl_usd, timeout=timeout)
    )
    return adapters
