"""Unit tests for the rotation planner — decisions, ordering and summaries."""
from __future__ import annotations

import pytest

from stable_rotator.models import Account, YieldRecord
from stable_rotator.services.matcher import match_holdings
from stable_rotator.services.planner import (
    plan_rotations,
    prioritize,
    should_rotate,
    summarize,
)
from stable_rotator.tokens import TOKEN_ADDRESS_MAP

AAVE_USDC = TOKEN_ADDRESS_MAP["aave-v3"]["USDC"]
MOONWELL_USDC = TOKEN_ADDRESS_MAP["moonwell"]["USDC"]


class TestShouldRotate:
    def test_above_threshold(self) -> None:
        assert should_rotate(4.0, 5.0, 0.5) is True

    def test_exactly_at_threshold(self) -> None:
        assert should_rotate(4.0, 4.5, 0.5) is True

    def test_just_below_threshold(self) -> None:
        assert should_rotate(4.0, 4.49, 0.5) is False

    def test_best_lower_than_current(self) -> None:
        assert should_rotate(6.0, 5.0) is False

    def test_equal(self) -> None:
        assert should_rotate(5.0, 5.0) is False

    def test_zero_current(self) -> None:
        assert should_rotate(0.0, 0.5) is True
        assert should_rotate(0.0, 0.0) is False


def _account(*holdings, account_id: str = "member-1") -> Account:
    return Account(account_id=account_id, wallet_address="0xAGENT", holdings=tuple(holdings))


@pytest.fixture()
def top(make_record) -> YieldRecord:
    return make_record("moonwell", 6.5, address=MOONWELL_USDC)


class TestPlanRotations:
    def test_no_top_record(self, make_holding) -> None:
        assert plan_rotations([_account(make_holding())], None) == []

    def test_empty_accounts(self, top) -> None:
        assert plan_rotations([], top) == []

    def test_account_without_holdings(self, top) -> None:
        assert plan_rotations([_account()], top) == []

    def test_gain_computation(self, top, make_record, make_holding) -> None:
        current = make_record("aave-v3", 5.0)
        holding = make_holding("aBasUSDC", balance=1000.0, current_apy=5.0, matched_record=current)

        [rec] = plan_rotations([_account(holding)], top, min_improvement=0.5)

        assert rec.apy_improvement == pytest.approx(1.5)
        assert rec.estimated_annual_gain_usd == pytest.approx(15.0)
        assert rec.target is top
        assert rec.source is holding
        assert rec.wallet_address == "0xAGENT"

    def test_plain_stable_rotates_from_zero(self, top, make_holding) -> None:
        [rec] = plan_rotations([_account(make_holding("USDC", balance=500.0))], top)
        assert rec.apy_improvement == pytest.approx(6.5)

    def test_skips_holding_already_in_target(self, top, make_holding) -> None:
        holding = make_holding("mUSDC", current_apy=6.45, matched_record=top)
        assert plan_rotations([_account(holding)], top) == []

    def test_same_protocol_different_rate_not_skipped(self, top, make_record, make_holding) -> None:
        stale = make_record("moonwell", 4.0, symbol="DAI")
        holding = make_holding("mDAI", current_apy=4.0, matched_record=stale)
        assert len(plan_rotations([_account(holding)], top)) == 1

    def test_below_threshold(self, top, make_record, make_holding) -> None:
        holding = make_holding("aBasUSDC", current_apy=6.2, matched_record=make_record("aave-v3", 6.2))
        assert plan_rotations([_account(holding)], top, min_improvement=0.5) == []

    def test_below_min_balance(self, top, make_holding) -> None:
        holding = make_holding("USDC", balance=5.0)
        assert plan_rotations([_account(holding)], top, min_balance_usd=10.0) == []

    def test_ignores_non_stable_holdings(self, top, make_holding) -> None:
        holding = make_holding("WETH", balance=1000.0, decimals=18)
        assert plan_rotations([_account(holding)], top) == []

    def test_multiple_holdings_and_accounts(self, top, make_holding) -> None:
        accounts = [
            _account(make_holding("USDC", balance=100), make_holding("DAI", balance=200, decimals=18)),
            _account(make_holding("USDC", balance=300), account_id="member-2"),
        ]
        recs = plan_rotations(accounts, top)
        assert len(recs) == 3
        for rec in recs:
            assert rec.apy_improvement >= 0.5

    def test_end_to_end_scenario(self, sample_catalog: list[YieldRecord], sample_account: Account) -> None:
        enriched = Account(
            account_id=sample_account.account_id,
            wallet_address=sample_account.wallet_address,
            holdings=tuple(match_holdings(sample_account.holdings, sample_catalog)),
        )
        assert enriched.holdings[0].current_apy == 5.5
        assert enriched.holdings[0].address == AAVE_USDC

        [rec] = plan_rotations([enriched], sample_catalog[0], min_improvement=0.5)

        assert rec.target.protocol == "moonwell"
        assert rec.target.apy == 6.5
        assert rec.apy_improvement == pytest.approx(1.0)
        assert rec.estimated_annual_gain_usd == pytest.approx(10.0)


class TestPrioritize:
    def test_sorted_by_gain_descending(self, make_recommendation) -> None:
        recs = [
            make_recommendation(usd_value=1000.0, apy_improvement=1.0),  # 10
            make_recommendation(usd_value=1000.0, apy_improvement=5.0),  # 50
            make_recommendation(usd_value=1000.0, apy_improvement=2.5),  # 25
        ]
        ordered = prioritize(recs)
        assert [r.estimated_annual_gain_usd for r in ordered] == pytest.approx([50.0, 25.0, 10.0])

    def test_does_not_mutate_input(self, make_recommendation) -> None:
        recs = [
            make_recommendation(apy_improvement=1.0),
            make_recommendation(apy_improvement=5.0),
        ]
        before = list(recs)
        prioritize(recs)
        assert recs == before

    def test_empty_and_single(self, make_recommendation) -> None:
        assert prioritize([]) == []
        single = make_recommendation()
        assert prioritize([single]) == [single]


class TestSummarize:
    def test_empty(self) -> None:
        summary = summarize([])
        assert summary.total_rotations == 0
        assert summary.unique_accounts == 0
        assert summary.total_value_usd == 0
        assert summary.total_estimated_annual_gain_usd == 0
        assert summary.average_apy_improvement == 0

    def test_totals(self, make_recommendation) -> None:
        recs = [
            make_recommendation("a", usd_value=1000.0, apy_improvement=1.0),
            make_recommendation("a", usd_value=500.0, apy_improvement=2.0),
            make_recommendation("b", usd_value=2000.0, apy_improvement=3.0),
        ]
        summary = summarize(recs)
        assert summary.total_rotations == 3
        assert summary.unique_accounts == 2
        assert summary.total_value_usd == pytest.approx(3500.0)
        assert summary.total_estimated_annual_gain_usd == pytest.approx(10.0 + 10.0 + 60.0)
        assert summary.average_apy_improvement == pytest.approx(2.0)
