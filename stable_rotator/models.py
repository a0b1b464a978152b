"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class YieldRecord:
    """One stablecoin lending opportunity on the target chain."""

    pool_id: str
    symbol: str
    protocol: str
    apy: float
    tvl_usd: float
    token_address: str | None = None
    chain: str = ""
    underlying_tokens: tuple[str, ...] = ()

    @property
    def is_tradeable(self) -> bool:
        return bool(self.token_address)


@dataclass(frozen=True)
class Holding:
    """One account's balance in one token, optionally enriched with yield data."""

    symbol: str
    address: str | None
    raw_balance: int
    decimals: int
    usd_value: float
    current_apy: float = 0.0
    matched_record: YieldRecord | None = None
    has_yield_match: bool = False

    @property
    def balance(self) -> float:
        """Human-readable balance."""
        return self.raw_balance / (10**self.decimals)

    @property
    def matched_protocol(self) -> str | None:
        return self.matched_record.protocol if self.matched_record else None


@dataclass(frozen=True)
class Account:
    """A managed wallet (swarm membership)."""

    account_id: str
    wallet_address: str
    holdings: tuple[Holding, ...] = ()


@dataclass(frozen=True)
class RotationRecommendation:
    """A proposed swap from one holding into the top yield record."""

    account_id: str
    source: Holding
    target: YieldRecord
    apy_improvement: float
    wallet_address: str = ""

    @property
    def estimated_annual_gain_usd(self) -> float:
        return self.source.usd_value * self.apy_improvement / 100


@dataclass(frozen=True)
class RotationSummary:
    total_rotations: int = 0
    unique_accounts: int = 0
    total_value_usd: float = 0.0
    total_estimated_annual_gain_usd: float = 0.0
    average_apy_improvement: float = 0.0


@dataclass(frozen=True)
class YieldSnapshot:
    """Ranked catalog plus the selected rotation target for one run."""

    records: tuple[YieldRecord, ...]
    top: YieldRecord | None
    fetched_at: datetime


@dataclass(frozen=True)
class SwapValidation:
    valid: bool
    errors: tuple[str, ...] = ()


# Outcome buckets
EXECUTED = "executed"
FAILED = "failed"
SKIPPED = "skipped"


@dataclass(frozen=True)
class SwapOutcome:
    """Result of dispatching a single recommendation."""

    recommendation: RotationRecommendation
    status: str
    transaction_id: str | None = None
    error: str | None = None
    dry_run: bool = False


@dataclass(frozen=True)
class DispatchResults:
    executed: tuple[SwapOutcome, ...] = ()
    failed: tuple[SwapOutcome, ...] = ()
    skipped: tuple[SwapOutcome, ...] = ()


@dataclass(frozen=True)
class RunStats:
    """Counters reported at the end of every rotation run."""

    accounts_checked: int = 0
    swaps_executed: int = 0
    swaps_skipped: int = 0
    errors: int = 0

    @property
    def exit_code(self) -> int:
        return 1 if self.errors > 0 else 0
