"""Rotation planner — decides which holdings to move into the top yield."""
from __future__ import annotations

import logging
from typing import Iterable

from ..classifier import DEFAULT_CLASSIFIER, TokenClassifier
from ..models import Account, RotationRecommendation, RotationSummary, YieldRecord
from .matcher import select_eligible

logger = logging.getLogger(__name__)

# Rates within this distance of the target are considered the same position.
SAME_POOL_APY_TOLERANCE = 0.1


def should_rotate(
    current_apy: float, best_apy: float, min_improvement: float = 0.5
) -> bool:
    """True when ``best_apy`` beats ``current_apy`` by at least the threshold."""
    improvement = best_apy - current_apy
    logger.debug(
        "APY comparison: current=%.2f%%, best=%.2f%%, improvement=%.2f%%, threshold=%s%%",
        current_apy, best_apy, improvement, min_improvement,
    )
    return improvement >= min_improvement


def plan_rotations(
    accounts: Iterable[Account],
    top_record: YieldRecord | None,
    min_improvement: float = 0.5,
    min_balance_usd: float = 10.0,
    classifier: TokenClassifier = DEFAULT_CLASSIFIER,
) -> list[RotationRecommendation]:
    """Recommend swaps into ``top_record`` for every account holding that qualifies.

    Holdings must already be enriched by the matcher.
    """
    if top_record is None:
        logger.warning("No best pool available for rotation calculation")
        return []

    rotations: list[RotationRecommendation] = []

    for account in accounts:
        for holding in select_eligible(account.holdings, classifier):
            if (
                holding.matched_protocol == top_record.protocol
                and abs(holding.current_apy - top_record.apy) < SAME_POOL_APY_TOLERANCE
            ):
                logger.debug(
                    "Account %s already in best pool %s at %.2f%% APY",
                    account.account_id, top_record.protocol, holding.current_apy,
                )
                continue

            if not should_rotate(holding.current_apy, top_record.apy, min_improvement):
                logger.debug(
                    "No rotation needed for %s holding %s (improvement below threshold)",
                    account.account_id, holding.symbol,
                )
                continue

            if holding.usd_value < min_balance_usd:
                logger.debug(
                    "Skipping %s holding %s: $%.2f below minimum $%.2f",
                    account.account_id, holding.symbol, holding.usd_value, min_balance_usd,
                )
                continue

            rotation = RotationRecommendation(
                account_id=account.account_id,
                wallet_address=account.wallet_address,
                source=holding,
                target=top_record,
                apy_improvement=top_record.apy - holding.current_apy,
            )
            rotations.append(rotation)
            logger.info(
                "Rotation recommended for %s: %s -> %s (+%.2f%% APY)",
                account.account_id, holding.symbol, top_record.symbol,
                rotation.apy_improvement,
            )

    logger.info("Total rotations recommended: %d", len(rotations))
    return rotations


def prioritize(
    rotations: list[RotationRecommendation],
) -> list[RotationRecommendation]:
    """New list ordered by estimated annual gain, largest first."""
    return sorted(rotations, key=lambda r: r.estimated_annual_gain_usd, reverse=True)


def summarize(rotations: list[RotationRecommendation]) -> RotationSummary:
    if not rotations:
        return RotationSummary()

    return RotationSummary(
        total_rotations=len(rotations),
        unique_accounts=len({r.account_id for r in rotations}),
        total_value_usd=sum(r.source.usd_value for r in rotations),
        total_estimated_annual_gain_usd=sum(r.estimated_annual_gain_usd for r in rotations),
        average_apy_improvement=sum(r.apy_improvement for r in rotations) / len(rotations),
    )
