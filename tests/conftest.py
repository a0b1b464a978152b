"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from stable_rotator.config import (
    AppConfig,
    ChainConfig,
    RotationConfig,
    SwarmVaultConfig,
    YieldSourceConfig,
)
from stable_rotator.models import Account, Holding, RotationRecommendation, YieldRecord
from stable_rotator.tokens import TOKEN_ADDRESS_MAP, UNDERLYING_TOKENS

AAVE_USDC = TOKEN_ADDRESS_MAP["aave-v3"]["USDC"]
MOONWELL_USDC = TOKEN_ADDRESS_MAP["moonwell"]["USDC"]
PLAIN_USDC = UNDERLYING_TOKENS["USDC"]


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config() -> AppConfig:
    return AppConfig(
        chain=ChainConfig(name="Base", chain_id=8453),
        rotation=RotationConfig(
            min_apy_improvement=0.5,
            min_balance_usd=10.0,
            max_slippage=1.0,
            dry_run=False,
        ),
        yield_source=YieldSourceConfig(
            base_url="https://yields.example.com",
            max_retries=3,
            retry_delay_seconds=0.0,
        ),
        swarm_vault=SwarmVaultConfig(
            api_url="https://vault.example.com",
            api_key="fake-key",
            swarm_id="swarm-1",
            poll_interval_seconds=0.0,
            wait_timeout_seconds=5.0,
        ),
    )


# ---------------------------------------------------------------------------
# Raw DeFiLlama pools
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_pools() -> list[dict]:
    return [
        {
            "pool": "aave-base-usdc",
            "chain": "Base",
            "project": "aave-v3",
            "symbol": "USDC",
            "apy": 5.2,
            "tvlUsd": 45_000_000,
            "stablecoin": True,
            "underlyingTokens": [PLAIN_USDC],
        },
        {
            "pool": "compound-base-usdc",
            "chain": "Base",
            "project": "compound-v3",
            "symbol": "USDC",
            "apy": 4.8,
            "tvlUsd": 30_000_000,
            "stablecoin": True,
        },
        {
            "pool": "moonwell-base-usdc",
            "chain": "Base",
            "project": "moonwell-lending",
            "symbol": "USDC",
            "apy": 6.5,
            "tvlUsd": 25_000_000,
            "stablecoin": True,
        },
        {
            "pool": "moonwell-base-dai",
            "chain": "Base",
            "project": "moonwell-lending",
            "symbol": "DAI",
            "apy": 5.0,
            "tvlUsd": 8_000_000,
            "stablecoin": True,
        },
        # Other chain
        {
            "pool": "aave-eth-usdc",
            "chain": "Ethereum",
            "project": "aave-v3",
            "symbol": "USDC",
            "apy": 3.5,
            "tvlUsd": 500_000_000,
            "stablecoin": True,
        },
        # Not a stablecoin pool
        {
            "pool": "uni-base-eth-usdc",
            "chain": "Base",
            "project": "uniswap-v3",
            "symbol": "ETH-USDC",
            "apy": 15.0,
            "tvlUsd": 20_000_000,
            "stablecoin": False,
        },
        # APY above the stable ceiling
        {
            "pool": "degen-base-usdc",
            "chain": "Base",
            "project": "degen-farm",
            "symbol": "USDC",
            "apy": 45.0,
            "tvlUsd": 2_000_000,
            "stablecoin": True,
        },
        # TVL too low
        {
            "pool": "tiny-base-usdc",
            "chain": "Base",
            "project": "tiny-lend",
            "symbol": "USDC",
            "apy": 9.0,
            "tvlUsd": 50_000,
            "stablecoin": True,
        },
        # EUR stable passes the flag but not the USD allow-list
        {
            "pool": "eur-base",
            "chain": "Base",
            "project": "euro-lend",
            "symbol": "EURC",
            "apy": 7.0,
            "tvlUsd": 5_000_000,
            "stablecoin": True,
        },
    ]


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


def _make_record(
    protocol: str = "aave-v3",
    apy: float = 5.5,
    symbol: str = "USDC",
    address: str | None = AAVE_USDC,
    tvl: float = 10_000_000,
    pool_id: str | None = None,
) -> YieldRecord:
    return YieldRecord(
        pool_id=pool_id or f"{protocol}-{symbol}".lower(),
        symbol=symbol,
        protocol=protocol,
        apy=apy,
        tvl_usd=tvl,
        token_address=address,
        chain="Base",
    )


def _make_holding(
    symbol: str = "USDC",
    address: str | None = None,
    balance: float = 1000.0,
    decimals: int = 6,
    usd_value: float | None = None,
    current_apy: float = 0.0,
    matched_record: YieldRecord | None = None,
) -> Holding:
    return Holding(
        symbol=symbol,
        address=address,
        raw_balance=int(round(balance * 10**decimals)),
        decimals=decimals,
        usd_value=balance if usd_value is None else usd_value,
        current_apy=current_apy,
        matched_record=matched_record,
        has_yield_match=matched_record is not None,
    )


def _make_recommendation(
    account_id: str = "member-1",
    usd_value: float = 1000.0,
    apy_improvement: float = 1.0,
    source: Holding | None = None,
    target: YieldRecord | None = None,
) -> RotationRecommendation:
    return RotationRecommendation(
        account_id=account_id,
        wallet_address="0xAGENT",
        source=source or _make_holding(balance=usd_value, usd_value=usd_value),
        target=target or _make_record("moonwell", 6.5, address=MOONWELL_USDC),
        apy_improvement=apy_improvement,
    )


@pytest.fixture()
def make_record():
    """Factory for YieldRecord; defaults to Aave USDC at 5.5%."""
    return _make_record


@pytest.fixture()
def make_holding():
    """Factory for Holding; USD value defaults to the human balance."""
    return _make_holding


@pytest.fixture()
def make_recommendation():
    """Factory for RotationRecommendation into Moonwell USDC at 6.5%."""
    return _make_recommendation


@pytest.fixture()
def sample_catalog() -> list[YieldRecord]:
    """The two-pool catalog used by the end-to-end scenario."""
    return [
        _make_record("moonwell", 6.5, address=MOONWELL_USDC, tvl=7_500_000),
        _make_record("aave-v3", 5.5, address=AAVE_USDC, tvl=10_000_000),
    ]


@pytest.fixture()
def sample_account() -> Account:
    return Account(
        account_id="member-1",
        wallet_address="0xAGENT1",
        holdings=(_make_holding("USDC", address=AAVE_USDC, balance=1000.0),),
    )


# ---------------------------------------------------------------------------
# Swarm Vault payloads
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_holdings_payload() -> dict:
    return {
        "memberCount": 2,
        "ethBalance": "0",
        "tokens": [],
        "members": [
            {
                "membershipId": "member-1",
                "agentWalletAddress": "0xAGENT1",
                "userWalletAddress": "0xUSER1",
                "ethBalance": "1000000000000000",
                "tokens": [
                    {
                        "address": AAVE_USDC,
                        "symbol": "aBasUSDC",
                        "decimals": 6,
                        "balance": "1000000000",  # 1000
                    },
                    {
                        "address": "0x4200000000000000000000000000000000000006",
                        "symbol": "WETH",
                        "decimals": 18,
                        "balance": "500000000000000000",
                    },
                ],
            },
            {
                "membershipId": "member-2",
                "agentWalletAddress": "0xAGENT2",
                "userWalletAddress": "0xUSER2",
                "ethBalance": "0",
                "tokens": [
                    {
                        "address": PLAIN_USDC,
                        "symbol": "USDC",
                        "decimals": 6,
                        "balance": "250000000",  # 250
                    },
                ],
            },
        ],
    }


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    chain:
      name: Base
      chain_id: 8453
    rotation:
      min_apy_improvement: 0.75
      min_balance_usd: 25
      max_slippage: 0.5
      dry_run: false
    yield_source:
      base_url: "https://yields.example.com/"
      min_tvl_usd: 250000
      max_apy: 20
      max_retries: 2
    swarm_vault:
      api_url: "https://vault.example.com"
      api_key: "key-123"
      swarm_id: "swarm-abc"
    logging:
      level: debug
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
