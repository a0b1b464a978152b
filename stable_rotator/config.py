"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    name: str = "Base"
    chain_id: int = 8453


@dataclass(frozen=True)
class RotationConfig:
    min_apy_improvement: float = 0.5
    min_balance_usd: float = 10.0
    max_slippage: float = 1.0
    dry_run: bool = False


@dataclass(frozen=True)
class YieldSourceConfig:
    base_url: str = "https://yields.llama.fi"
    min_tvl_usd: float = 100_000.0
    max_apy: float = 25.0
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    timeout: int = 30


@dataclass(frozen=True)
class SwarmVaultConfig:
    api_url: str = "https://api.swarmvault.xyz"
    api_key: str = ""
    swarm_id: str = ""
    poll_interval_seconds: float = 3.0
    wait_timeout_seconds: float = 300.0


@dataclass(frozen=True)
class AppConfig:
    chain: ChainConfig = field(default_factory=ChainConfig)
    rotation: RotationConfig = field(default_factory=RotationConfig)
    yield_source: YieldSourceConfig = field(default_factory=YieldSourceConfig)
    swarm_vault: SwarmVaultConfig = field(default_factory=SwarmVaultConfig)
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


def _get(raw: dict[str, Any], key: str, default: Any) -> Any:
    """Return raw[key], treating missing, null and empty strings as unset."""
    value = raw.get(key)
    if value is None or value == "":
        return default
    return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_chain(raw: dict[str, Any]) -> ChainConfig:
    return ChainConfig(
        name=str(_get(raw, "name", "Base")),
        chain_id=int(_get(raw, "chain_id", 8453)),
    )


def _build_rotation(raw: dict[str, Any]) -> RotationConfig:
    return RotationConfig(
        min_apy_improvement=float(_get(raw, "min_apy_improvement", 0.5)),
        min_balance_usd=float(_get(raw, "min_balance_usd", 10.0)),
        max_slippage=float(_get(raw, "max_slippage", 1.0)),
        dry_run=_as_bool(_get(raw, "dry_run", False)),
    )


def _build_yield_source(raw: dict[str, Any]) -> YieldSourceConfig:
    return YieldSourceConfig(
        base_url=str(_get(raw, "base_url", YieldSourceConfig.base_url)).rstrip("/"),
        min_tvl_usd=float(_get(raw, "min_tvl_usd", 100_000.0)),
        max_apy=float(_get(raw, "max_apy", 25.0)),
        max_retries=int(_get(raw, "max_retries", 3)),
        retry_delay_seconds=float(_get(raw, "retry_delay_seconds", 1.0)),
        timeout=int(_get(raw, "timeout", 30)),
    )


def _build_swarm_vault(raw: dict[str, Any]) -> SwarmVaultConfig:
    return SwarmVaultConfig(
        api_url=str(_get(raw, "api_url", SwarmVaultConfig.api_url)).rstrip("/"),
        api_key=str(_get(raw, "api_key", "")),
        swarm_id=str(_get(raw, "swarm_id", "")),
        poll_interval_seconds=float(_get(raw, "poll_interval_seconds", 3.0)),
        wait_timeout_seconds=float(_get(raw, "wait_timeout_seconds", 300.0)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    config_path: str | Path | None = None, require_wallet: bool = True
) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
        require_wallet: When False, Swarm Vault credentials may be absent
            (read-only commands such as ``inspect``).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        chain=_build_chain(raw.get("chain") or {}),
        rotation=_build_rotation(raw.get("rotation") or {}),
        yield_source=_build_yield_source(raw.get("yield_source") or {}),
        swarm_vault=_build_swarm_vault(raw.get("swarm_vault") or {}),
        log_level=str(_get(raw.get("logging") or {}, "level", "INFO")).upper(),
    )

    _validate(cfg, require_wallet)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig, require_wallet: bool = True) -> None:
    """Raise on invalid configuration."""
    rotation = cfg.rotation
    if rotation.min_apy_improvement < 0:
        raise ValueError("min_apy_improvement must not be negative")
    if rotation.min_balance_usd < 0:
        raise ValueError("min_balance_usd must not be negative")
    if not 0 < rotation.max_slippage <= 50:
        raise ValueError(
            f"max_slippage must be within (0, 50], got {rotation.max_slippage}"
        )

    source = cfg.yield_source
    if source.min_tvl_usd < 0:
        raise ValueError("min_tvl_usd must not be negative")
    if source.max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    if require_wallet:
        if not cfg.swarm_vault.api_key:
            raise ValueError("Swarm Vault api_key is not configured")
        if not cfg.swarm_vault.swarm_id:
            raise ValueError("Swarm Vault swarm_id is not configured")
