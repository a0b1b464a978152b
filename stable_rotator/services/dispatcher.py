"""Swap dispatcher — validates recommendations and submits them one at a time."""
from __future__ import annotations

import logging
from typing import Any

from ..interfaces.wallet import WalletClient
from ..models import (
    EXECUTED,
    FAILED,
    SKIPPED,
    DispatchResults,
    RotationRecommendation,
    SwapOutcome,
    SwapValidation,
)

logger = logging.getLogger(__name__)

SELL_PERCENTAGE = 100


def _progress(tx: dict[str, Any]) -> None:
    targets = tx.get("targets") or []
    confirmed = sum(1 for t in targets if t.get("status") == "CONFIRMED")
    failed = sum(1 for t in targets if t.get("status") == "FAILED")
    logger.info(
        "  Status: %s | Confirmed: %d/%d | Failed: %d",
        tx.get("status"), confirmed, len(targets), failed,
    )


def _failed_target_errors(tx: dict[str, Any]) -> list[str]:
    return [
        str(t.get("error") or "unknown error")
        for t in tx.get("targets") or []
        if t.get("status") == "FAILED"
    ]


class SwapDispatcher:
    """Submit rotation swaps through an injected wallet-management client."""

    def __init__(
        self,
        wallet: WalletClient,
        swarm_id: str,
        min_balance_usd: float = 10.0,
        max_slippage: float = 1.0,
        dry_run: bool = False,
    ) -> None:
        self._wallet = wallet
        self._swarm_id = swarm_id
        self._min_balance_usd = min_balance_usd
        self._max_slippage = max_slippage
        self._dry_run = dry_run

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, rotation: RotationRecommendation) -> SwapValidation:
        """Collect every rule the recommendation violates."""
        errors: list[str] = []
        source, target = rotation.source, rotation.target

        if not rotation.account_id:
            errors.append("Missing account id")
        if not source.symbol:
            errors.append("Missing source token")
        if not target.symbol:
            errors.append("Missing destination token")
        if source.raw_balance <= 0:
            errors.append("Invalid swap amount")
        if source.usd_value < self._min_balance_usd:
            errors.append(f"Balance below minimum (${self._min_balance_usd:g})")
        if not target.token_address:
            errors.append(
                f"Destination {target.protocol} {target.symbol} has no token address"
            )
        elif source.address and source.address.lower() == target.token_address.lower():
            errors.append("Source and destination token are the same")

        return SwapValidation(valid=not errors, errors=tuple(errors))

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _swap_args(self, rotation: RotationRecommendation) -> dict[str, Any]:
        return {
            "sell_token": rotation.source.address or rotation.source.symbol,
            "buy_token": rotation.target.token_address,
            "sell_percentage": SELL_PERCENTAGE,
            "slippage_percentage": self._max_slippage,
            "membership_ids": [rotation.account_id],
        }

    async def execute(self, rotation: RotationRecommendation) -> SwapOutcome:
        """Preview, execute and wait for a single swap. Never raises."""
        source, target = rotation.source, rotation.target
        logger.info(
            "Executing swap for %s: %.4f %s -> %s (%s)",
            rotation.account_id, source.balance, source.symbol,
            target.symbol, target.protocol,
        )
        args = self._swap_args(rotation)

        try:
            preview = await self._wallet.preview_swap(self._swarm_id, **args)
            if int(preview.get("errorCount") or 0) > 0:
                member_errors = [
                    m.get("error") for m in preview.get("members") or [] if m.get("error")
                ]
                return SwapOutcome(
                    rotation, FAILED,
                    error="; ".join(member_errors) or "Swap preview reported errors",
                )

            if self._dry_run:
                logger.info(
                    "[DRY RUN] Swap would be executed: %s %s -> %s (sell %s, buy %s, slippage %s%%)",
                    rotation.account_id, source.symbol, target.symbol,
                    preview.get("totalSellAmount"), preview.get("totalBuyAmount"),
                    self._max_slippage,
                )
                return SwapOutcome(rotation, EXECUTED, dry_run=True)

            result = await self._wallet.execute_swap(self._swarm_id, **args)
            tx_id = result.get("transactionId")
            if not tx_id:
                return SwapOutcome(rotation, FAILED, error="No transaction id returned")

            logger.info("Swap submitted (transaction %s), waiting for completion", tx_id)
            tx = await self._wallet.wait_for_transaction(tx_id, on_poll=_progress)
        except Exception as e:
            logger.error("Swap error for %s: %s", rotation.account_id, e)
            return SwapOutcome(rotation, FAILED, error=str(e))

        status = tx.get("status")
        target_errors = _failed_target_errors(tx)
        if status == "COMPLETED" and not target_errors:
            return SwapOutcome(rotation, EXECUTED, transaction_id=tx_id)

        return SwapOutcome(
            rotation, FAILED,
            transaction_id=tx_id,
            error="; ".join(target_errors) or f"Transaction ended with status {status}",
        )

    async def dispatch(
        self, rotations: list[RotationRecommendation]
    ) -> DispatchResults:
        """Validate and execute ``rotations`` sequentially, in the given order."""
        executed: list[SwapOutcome] = []
        failed: list[SwapOutcome] = []
        skipped: list[SwapOutcome] = []

        for rotation in rotations:
            validation = self.validate(rotation)
            if not validation.valid:
                logger.warning(
                    "Skipping invalid rotation for %s: %s",
                    rotation.account_id or "<unknown>", "; ".join(validation.errors),
                )
                skipped.append(
                    SwapOutcome(rotation, SKIPPED, error="; ".join(validation.errors))
                )
                continue

            outcome = await self.execute(rotation)
            if outcome.status == EXECUTED:
                executed.append(outcome)
                logger.info(
                    "Swap done for %s: %s -> %s (+%.2f%% APY)%s",
                    rotation.account_id, rotation.source.symbol, rotation.target.symbol,
                    rotation.apy_improvement, " [dry run]" if outcome.dry_run else "",
                )
            else:
                failed.append(outcome)
                logger.error(
                    "Swap failed for %s: %s", rotation.account_id, outcome.error
                )

        return DispatchResults(
            executed=tuple(executed), failed=tuple(failed), skipped=tuple(skipped)
        )
