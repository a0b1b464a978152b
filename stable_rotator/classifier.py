"""Token classification from a fixed prefix × base-symbol rule table.

A yield-bearing token symbol is a protocol prefix glued to a base stable
symbol, optionally followed by a version suffix:

    aBasUSDC  ->  aBas + USDC
    mUSDbC    ->  m    + USDbC
    cUSDCv3   ->  c    + USDC + v3

Bare base symbols ("USDC", "DAI") are stable but *not* yield-bearing.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

from .tokens import underlying_addresses, yield_bearing_addresses

YIELD_PREFIXES: tuple[str, ...] = ("aBas", "a", "c", "m", "s")
BASE_STABLES: tuple[str, ...] = ("USDC", "USDbC", "USDT", "DAI")


def _alternation(words: tuple[str, ...]) -> str:
    # Longest first so "aBas" is preferred over "a".
    ordered = sorted(words, key=len, reverse=True)
    return "|".join(re.escape(w) for w in ordered)


@dataclass(frozen=True)
class TokenClassifier:
    """Classify token symbols/addresses as plain or yield-bearing stables."""

    prefixes: tuple[str, ...] = YIELD_PREFIXES
    bases: tuple[str, ...] = BASE_STABLES
    yield_bearing_token_addresses: frozenset[str] = field(
        default_factory=yield_bearing_addresses
    )
    base_token_addresses: frozenset[str] = field(default_factory=underlying_addresses)

    def __post_init__(self) -> None:
        bases = _alternation(self.bases)
        prefixes = _alternation(self.prefixes)
        object.__setattr__(
            self, "_plain_re", re.compile(rf"^(?P<base>{bases})$", re.IGNORECASE)
        )
        object.__setattr__(
            self,
            "_prefixed_re",
            re.compile(
                rf"^(?:{prefixes})(?P<base>{bases})(?:v\d+)?$", re.IGNORECASE
            ),
        )

    def _canonical_base(self, matched: str) -> str:
        for base in self.bases:
            if base.lower() == matched.lower():
                return base
        return matched

    def base_symbol(self, symbol: str | None) -> str | None:
        """Base stable symbol of a plain or prefixed symbol, else None."""
        if not symbol:
            return None
        m = self._plain_re.match(symbol) or self._prefixed_re.match(symbol)
        return self._canonical_base(m.group("base")) if m else None

    def is_stable(self, symbol: str | None) -> bool:
        return self.base_symbol(symbol) is not None

    def is_yield_bearing(self, symbol: str | None, address: str | None = None) -> bool:
        if address and address.lower() in self.yield_bearing_token_addresses:
            return True
        return bool(symbol) and self._prefixed_re.match(symbol) is not None

    def is_base_address(self, address: str | None) -> bool:
        return bool(address) and address.lower() in self.base_token_addresses


DEFAULT_CLASSIFIER = TokenClassifier()
