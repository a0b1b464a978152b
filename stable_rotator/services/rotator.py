"""Rotation orchestration — yields → holdings → plan → dispatch."""
from __future__ import annotations

import logging

from ..classifier import DEFAULT_CLASSIFIER, TokenClassifier
from ..config import AppConfig
from ..interfaces.wallet import WalletClient
from ..interfaces.yield_source import YieldSource
from ..models import Account, RunStats, YieldRecord, YieldSnapshot
from ..wallets.swarm import SwarmVaultClient, parse_accounts
from ..yields import DefiLlamaClient
from ..yields import catalog
from .dispatcher import SwapDispatcher
from .matcher import match_holdings
from .planner import plan_rotations, prioritize, summarize

logger = logging.getLogger(__name__)


class Rotator:
    """Runs one stablecoin yield rotation pass over every swarm member."""

    def __init__(
        self,
        config: AppConfig,
        yield_source: YieldSource | None = None,
        wallet: WalletClient | None = None,
        classifier: TokenClassifier = DEFAULT_CLASSIFIER,
    ) -> None:
        self._config = config
        self._rotation = config.rotation
        self._classifier = classifier
        self._yield_source: YieldSource = yield_source or DefiLlamaClient(
            config.yield_source, config.chain
        )
        self._wallet: WalletClient | None = wallet
        if self._wallet is None and config.swarm_vault.api_key:
            self._wallet = SwarmVaultClient(config.swarm_vault)

    # ------------------------------------------------------------------
    # Formatting helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _format_record(rank: int, record: YieldRecord) -> str:
        return (
            f"  {rank:>2} | {record.apy:6.2f}% | {record.symbol[:19]:<19} | "
            f"{record.protocol[:19]:<19} | ${record.tvl_usd / 1_000_000:.2f}M"
        )

    def _build_inspect_report(self, snapshot: YieldSnapshot, count: int) -> str:
        records = list(snapshot.records)
        top = catalog.top_records(records, count)
        mapped = catalog.tradeable_records(records)

        lines = [f"TOP {len(top)} {self._config.chain.name.upper()} STABLECOIN YIELDS", ""]
        lines.append("Rank | APY     | Symbol              | Protocol            | TVL")
        lines.extend(self._format_record(i, r) for i, r in enumerate(top, start=1))

        lines += ["", "TRADEABLE YIELD POOLS (mapped protocols)", ""]
        if not mapped:
            lines.append("No pools found from mapped protocols.")
        for i, record in enumerate(mapped, start=1):
            lines.append(f"{self._format_record(i, record)} | {record.token_address}")

        lines += ["", "YIELD BY PROTOCOL (tradeable only)"]
        for protocol, pools in catalog.group_by_protocol(mapped).items():
            lines.append(f"\n{protocol.upper()}:")
            for pool in pools:
                lines.append(
                    f"  - {pool.symbol}: {pool.apy:.2f}% APY "
                    f"(TVL: ${pool.tvl_usd / 1_000_000:.2f}M)"
                )

        lines += [
            "",
            "SUMMARY",
            f"Total {self._config.chain.name} stablecoin pools: {len(records)}",
            f"Tradeable pools (mapped): {len(mapped)}",
        ]
        if mapped:
            best = mapped[0]
            lines.append(
                f"Best tradeable yield: {best.symbol} at {best.apy:.2f}% APY ({best.protocol})"
            )
        lines.append(f"Data fetched at: {snapshot.fetched_at.isoformat()}")
        return "\n".join(lines)

    @staticmethod
    def _log_summary(stats: RunStats) -> None:
        logger.info("=== Rotation Summary ===")
        logger.info("Accounts checked: %d", stats.accounts_checked)
        logger.info("Swaps executed: %d", stats.swaps_executed)
        logger.info("Swaps skipped: %d", stats.swaps_skipped)
        logger.info("Errors: %d", stats.errors)

    # ------------------------------------------------------------------
    # Core workflows
    # ------------------------------------------------------------------

    async def fetch_accounts(self, records: list[YieldRecord]) -> list[Account]:
        """Query member holdings and enrich them with current yields."""
        if self._wallet is None:
            raise RuntimeError("Swarm Vault client is not configured")

        payload = await self._wallet.get_holdings(self._config.swarm_vault.swarm_id)
        accounts = parse_accounts(payload, self._classifier)
        return [
            Account(
                account_id=a.account_id,
                wallet_address=a.wallet_address,
                holdings=tuple(match_holdings(a.holdings, records, self._classifier)),
            )
            for a in accounts
        ]

    async def run(self) -> RunStats:
        """Execute one full rotation pass and return its statistics."""
        rotation = self._rotation
        logger.info("=== Starting Yield Rotation ===")
        logger.info("Chain: %s (%d)", self._config.chain.name, self._config.chain.chain_id)
        logger.info("Mode: %s", "DRY RUN" if rotation.dry_run else "LIVE")
        logger.info("Min APY improvement threshold: %s%%", rotation.min_apy_improvement)
        logger.info("Min balance: $%s", rotation.min_balance_usd)

        accounts_checked = executed = skipped = errors = 0

        try:
            logger.info("Step 1: Fetching yield data from DeFiLlama...")
            snapshot = await self._yield_source.fetch_snapshot()
            if snapshot.top is None:
                logger.warning(
                    "No yield-bearing stablecoins found on %s. Exiting.",
                    self._config.chain.name,
                )
                return self._finish(RunStats())

            logger.info(
                "Best yield available: %s at %.2f%% APY (%s)",
                snapshot.top.symbol, snapshot.top.apy, snapshot.top.protocol,
            )

            logger.info("Step 2: Fetching swarm member balances...")
            accounts = await self.fetch_accounts(list(snapshot.records))
            accounts_checked = len(accounts)
            if not accounts:
                logger.info("No swarm members found. Exiting.")
                return self._finish(RunStats())
            logger.info("Found %d swarm members to check", accounts_checked)

            logger.info("Step 3: Calculating rotation opportunities...")
            recommendations = prioritize(
                plan_rotations(
                    accounts,
                    snapshot.top,
                    min_improvement=rotation.min_apy_improvement,
                    min_balance_usd=rotation.min_balance_usd,
                    classifier=self._classifier,
                )
            )
            summary = summarize(recommendations)
            logger.info("Rotation opportunities found: %d", summary.total_rotations)
            logger.info("Total value to rotate: $%.2f", summary.total_value_usd)
            logger.info(
                "Estimated annual gain: $%.2f", summary.total_estimated_annual_gain_usd
            )

            if not recommendations:
                logger.info(
                    "No rotations needed - all holdings are optimal or below threshold."
                )
                return self._finish(RunStats(accounts_checked=accounts_checked))

            logger.info("Step 4: Executing rotations...")
            dispatcher = SwapDispatcher(
                self._wallet,
                self._config.swarm_vault.swarm_id,
                min_balance_usd=rotation.min_balance_usd,
                max_slippage=rotation.max_slippage,
                dry_run=rotation.dry_run,
            )
            results = await dispatcher.dispatch(recommendations)
            executed = len(results.executed)
            skipped = len(results.skipped)
            errors = len(results.failed)
        except Exception as e:
            logger.error("Rotation failed with error: %s", e)
            self._log_summary(
                RunStats(accounts_checked, executed, skipped, errors + 1)
            )
            raise

        logger.info("Step 5: Rotation complete")
        return self._finish(
            RunStats(
                accounts_checked=accounts_checked,
                swaps_executed=executed,
                swaps_skipped=skipped,
                errors=errors,
            )
        )

    def _finish(self, stats: RunStats) -> RunStats:
        self._log_summary(stats)
        return stats

    async def inspect(self, count: int = 20) -> str:
        """Fetch the catalog and return a human-readable yield report."""
        snapshot = await self._yield_source.fetch_snapshot()
        return self._build_inspect_report(snapshot, count)
