"""Yield source protocol — rate feed abstraction."""
from typing import Any, Protocol

from ..models import YieldSnapshot


class YieldSource(Protocol):
    """Abstract interface for fetching ranked stablecoin yields."""

    async def fetch_pools(self) -> list[dict[str, Any]]: ...

    async def fetch_snapshot(self) -> YieldSnapshot: ...
