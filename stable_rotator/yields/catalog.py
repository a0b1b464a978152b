"""Pure catalog functions for DeFiLlama pool records — no I/O."""
from __future__ import annotations

import logging
from typing import Any

from ..models import YieldRecord
from ..tokens import resolve_token_address

logger = logging.getLogger(__name__)

DEFAULT_CHAIN = "Base"
DEFAULT_MIN_TVL = 100_000.0
# Lending rates on plain stablecoin deposits rarely sustain more than this;
# anything above is treated as a volatile or incentivised position.
MAX_STABLE_APY = 25.0

# A pool symbol must contain one of these to count as a USD stable.
USD_STABLE_FRAGMENTS: tuple[str, ...] = ("USDC", "USDT", "DAI", "USDBC")


def _num(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def is_usd_stable_symbol(symbol: str | None) -> bool:
    """True if the pool symbol contains a recognised USD stable fragment."""
    if not symbol:
        return False
    upper = symbol.upper()
    return any(fragment in upper for fragment in USD_STABLE_FRAGMENTS)


def _passes_base_filters(pool: dict[str, Any], chain: str, min_tvl: float) -> bool:
    return (
        pool.get("chain") == chain
        and pool.get("stablecoin") is True
        and _num(pool.get("tvlUsd")) >= min_tvl
        and is_usd_stable_symbol(pool.get("symbol"))
    )


def to_yield_record(pool: dict[str, Any]) -> YieldRecord:
    """Convert one raw DeFiLlama pool dict into a YieldRecord."""
    protocol = pool.get("project") or ""
    symbol = pool.get("symbol") or ""
    return YieldRecord(
        pool_id=str(pool.get("pool") or ""),
        symbol=symbol,
        protocol=protocol,
        apy=_num(pool.get("apy")),
        tvl_usd=_num(pool.get("tvlUsd")),
        token_address=resolve_token_address(protocol, symbol),
        chain=pool.get("chain") or "",
        underlying_tokens=tuple(pool.get("underlyingTokens") or ()),
    )


def build_catalog(
    raw_records: list[dict[str, Any]],
    min_tvl: float = DEFAULT_MIN_TVL,
    max_apy: float = MAX_STABLE_APY,
    chain: str = DEFAULT_CHAIN,
) -> list[YieldRecord]:
    """Filter raw pools down to USD stablecoin lending records on ``chain``.

    Kept records satisfy: chain match, ``stablecoin`` flag set,
    ``tvlUsd >= min_tvl``, ``0 <= apy <= max_apy`` and a USD stable symbol.
    Order of the input is preserved.
    """
    candidates = [p for p in raw_records or [] if _passes_base_filters(p, chain, min_tvl)]
    kept = [p for p in candidates if 0 <= _num(p.get("apy")) <= max_apy]

    logger.info(
        "Found %d %s stablecoin pools (TVL >= $%s, APY <= %s%%)",
        len(kept), chain, f"{min_tvl:,.0f}", max_apy,
    )
    excluded = len(candidates) - len(kept)
    if excluded:
        logger.debug(
            "Excluded %d pools with negative APY or APY > %s%% (likely volatile positions)",
            excluded, max_apy,
        )

    return [to_yield_record(p) for p in kept]


def rank_by_apy(records: list[YieldRecord]) -> list[YieldRecord]:
    """Return a new list sorted by APY descending. Ties keep input order."""
    return sorted(records, key=lambda r: r.apy, reverse=True)


def select_top_tradeable(ranked: list[YieldRecord]) -> YieldRecord | None:
    """Pick the best record that has a swappable token address.

    Falls back to the overall top record (without an address) so the run
    still reports the best yield even when it cannot be traded into.
    """
    if not ranked:
        logger.warning("No pools available for yield comparison")
        return None

    for record in ranked:
        if record.token_address:
            logger.info(
                "Top tradeable stablecoin: %s at %.2f%% APY (%s)",
                record.symbol, record.apy, record.protocol,
            )
            return record

    best = ranked[0]
    logger.warning(
        "No tradeable pool found; best yield %s at %.2f%% APY (%s) has no token address",
        best.symbol, best.apy, best.protocol,
    )
    return best


def top_records(records: list[YieldRecord], count: int = 5) -> list[YieldRecord]:
    return rank_by_apy(records)[:max(count, 0)]


def tradeable_records(records: list[YieldRecord]) -> list[YieldRecord]:
    """Ranked records that can be swapped into."""
    return [r for r in rank_by_apy(records) if r.token_address]


def find_by_symbol(records: list[YieldRecord], symbol: str) -> YieldRecord | None:
    wanted = (symbol or "").lower()
    for record in records:
        if record.symbol.lower() == wanted:
            return record
    return None


def group_by_protocol(records: list[YieldRecord]) -> dict[str, list[YieldRecord]]:
    groups: dict[str, list[YieldRecord]] = {}
    for record in records:
        groups.setdefault(record.protocol, []).append(record)
    return groups
