"""DeFiLlama yields API client with linear retry backoff."""
from __future__ import annotations

import asyncio
import logging
import ssl
from datetime import datetime, timezone
from typing import Any

import aiohttp
import certifi

from ..config import ChainConfig, YieldSourceConfig
from ..models import YieldSnapshot
from . import catalog

logger = logging.getLogger(__name__)


class YieldFeedError(RuntimeError):
    """Raised when the yield feed cannot be fetched after all retries."""


class DefiLlamaClient:
    """Fetch stablecoin lending pools from https://yields.llama.fi."""

    def __init__(
        self, config: YieldSourceConfig, chain: ChainConfig | None = None
    ) -> None:
        self.pools_url = f"{config.base_url}/pools"
        self.max_retries = config.max_retries
        self.retry_delay = config.retry_delay_seconds
        self.timeout = config.timeout
        self.min_tvl = config.min_tvl_usd
        self.max_apy = config.max_apy
        self.chain = (chain or ChainConfig()).name

    async def _get_pools(self) -> list[dict[str, Any]]:
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.get(
                self.pools_url, timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if response.status != 200:
                    raise YieldFeedError(f"HTTP {response.status}")
                data = await response.json()
                return data.get("data") or []

    async def fetch_pools(self) -> list[dict[str, Any]]:
        """Fetch all raw pool records, retrying with a linearly growing delay."""
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug("Fetching yield pools from DeFiLlama (attempt %d)", attempt)
                pools = await self._get_pools()
                logger.info("Fetched %d pools from DeFiLlama", len(pools))
                return pools
            except Exception as e:
                last_error = e
                logger.warning(
                    "DeFiLlama request failed (attempt %d/%d): %s",
                    attempt, self.max_retries, e,
                )
                if attempt < self.max_retries:
                    await asyncio.sleep(self.retry_delay * attempt)

        raise YieldFeedError(
            f"Failed to fetch yield pools after {self.max_retries} attempts: {last_error}"
        )

    async def fetch_snapshot(self) -> YieldSnapshot:
        """Fetch, filter and rank pools, and select the rotation target."""
        pools = await self.fetch_pools()
        records = catalog.build_catalog(
            pools, min_tvl=self.min_tvl, max_apy=self.max_apy, chain=self.chain
        )
        ranked = catalog.rank_by_apy(records)
        return YieldSnapshot(
            records=tuple(ranked),
            top=catalog.select_top_tradeable(ranked),
            fetched_at=datetime.now(timezone.utc),
        )
