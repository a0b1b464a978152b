"""Holding matcher — attaches the current yield to each holding."""
from __future__ import annotations

import logging
from dataclasses import replace

from ..classifier import DEFAULT_CLASSIFIER, TokenClassifier
from ..models import Holding, YieldRecord

logger = logging.getLogger(__name__)


def _address_index(
    catalog: list[YieldRecord], classifier: TokenClassifier
) -> dict[str, YieldRecord]:
    index: dict[str, YieldRecord] = {}
    for record in catalog:
        address = record.token_address
        # Plain underlying tokens identify a currency, not a deposit.
        if not address or classifier.is_base_address(address):
            continue
        index[address.lower()] = record
    return index


def _symbol_index(catalog: list[YieldRecord]) -> dict[str, list[YieldRecord]]:
    index: dict[str, list[YieldRecord]] = {}
    for record in catalog:
        if record.symbol:
            index.setdefault(record.symbol.lower(), []).append(record)
    return index


def _best_by_apy(candidates: list[YieldRecord]) -> YieldRecord | None:
    best: YieldRecord | None = None
    for record in candidates:
        if best is None or record.apy > best.apy:
            best = record
    return best


def _match_one(
    holding: Holding,
    by_address: dict[str, YieldRecord],
    by_symbol: dict[str, list[YieldRecord]],
    classifier: TokenClassifier,
) -> YieldRecord | None:
    if holding.address:
        record = by_address.get(holding.address.lower())
        if record is not None:
            return record

    if not classifier.is_yield_bearing(holding.symbol):
        return None

    base = classifier.base_symbol(holding.symbol) or ""
    candidates = by_symbol.get(holding.symbol.lower()) or by_symbol.get(base.lower(), [])
    return _best_by_apy(candidates)


def match_holdings(
    holdings: list[Holding] | tuple[Holding, ...],
    catalog: list[YieldRecord] | tuple[YieldRecord, ...],
    classifier: TokenClassifier = DEFAULT_CLASSIFIER,
) -> list[Holding]:
    """Return enriched copies of ``holdings`` with their current APY.

    Address matches win outright. Symbol matches are only tried for
    yield-bearing names (aBasUSDC, mDAI, ...); a bare base stable such as
    ``USDC`` earns nothing and is left unmatched.
    """
    records = list(catalog or ())
    by_address = _address_index(records, classifier)
    by_symbol = _symbol_index(records)

    enriched: list[Holding] = []
    for holding in holdings or ():
        record = _match_one(holding, by_address, by_symbol, classifier)
        if record is None:
            enriched.append(
                replace(holding, current_apy=0.0, matched_record=None, has_yield_match=False)
            )
            continue

        logger.debug(
            "Matched %s to %s %s at %.2f%% APY",
            holding.symbol or holding.address, record.protocol, record.symbol, record.apy,
        )
        enriched.append(
            replace(
                holding,
                current_apy=record.apy,
                matched_record=record,
                has_yield_match=True,
            )
        )

    return enriched


def select_eligible(
    holdings: list[Holding] | tuple[Holding, ...],
    classifier: TokenClassifier = DEFAULT_CLASSIFIER,
) -> list[Holding]:
    """Holdings that may be rotated: plain or yield-bearing USD stables."""
    return [
        h for h in holdings
        if classifier.is_stable(h.symbol) or classifier.is_yield_bearing(h.symbol, h.address)
    ]
