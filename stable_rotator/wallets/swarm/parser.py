"""Pure parsing of Swarm Vault holdings payloads into Accounts — no I/O."""
from __future__ import annotations

import logging
from typing import Any

from ...classifier import DEFAULT_CLASSIFIER, TokenClassifier
from ...models import Account, Holding

logger = logging.getLogger(__name__)


def _to_int(value: Any) -> int:
    """Parse a base-unit amount (decimal string or number)."""
    try:
        return int(str(value or 0))
    except ValueError:
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        logger.warning("Unparseable token balance %r, treating as 0", value)
        return 0


def parse_holding(
    token: dict[str, Any], classifier: TokenClassifier = DEFAULT_CLASSIFIER
) -> Holding:
    """Build a Holding from one token entry.

    Stablecoins are valued 1:1 with their human balance; everything else
    gets a USD value of 0.
    """
    symbol = token.get("symbol") or ""
    decimals = int(token.get("decimals") or 0)
    raw_balance = _to_int(token.get("balance"))
    usd_value = (
        raw_balance / (10**decimals) if classifier.is_stable(symbol) else 0.0
    )
    return Holding(
        symbol=symbol,
        address=token.get("address") or None,
        raw_balance=raw_balance,
        decimals=decimals,
        usd_value=usd_value,
    )


def parse_accounts(
    payload: dict[str, Any], classifier: TokenClassifier = DEFAULT_CLASSIFIER
) -> list[Account]:
    """Turn a holdings response (with members) into one Account per member."""
    accounts: list[Account] = []

    for member in payload.get("members") or []:
        account_id = member.get("membershipId") or ""
        wallet = member.get("agentWalletAddress") or member.get("userWalletAddress") or ""
        holdings = tuple(
            parse_holding(token, classifier) for token in member.get("tokens") or []
        )
        if not account_id:
            logger.debug("Member without membershipId (%s)", wallet or "unknown wallet")
        accounts.append(
            Account(account_id=account_id, wallet_address=wallet, holdings=holdings)
        )

    return accounts
