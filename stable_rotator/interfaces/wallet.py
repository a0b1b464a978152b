"""Wallet client protocol — custody and swap execution abstraction."""
from typing import Any, Callable, Protocol


class WalletClient(Protocol):
    """Abstract interface for the external wallet-management service."""

    async def get_holdings(
        self, swarm_id: str, include_members: bool = True
    ) -> dict[str, Any]: ...

    async def preview_swap(
        self,
        swarm_id: str,
        sell_token: str,
        buy_token: str,
        sell_percentage: int = 100,
        slippage_percentage: float = 1.0,
        membership_ids: list[str] | None = None,
    ) -> dict[str, Any]: ...

    async def execute_swap(
        self,
        swarm_id: str,
        sell_token: str,
        buy_token: str,
        sell_percentage: int = 100,
        slippage_percentage: float = 1.0,
        membership_ids: list[str] | None = None,
    ) -> dict[str, Any]: ...

    async def wait_for_transaction(
        self,
        transaction_id: str,
        on_poll: Callable[[dict[str, Any]], None] | None = None,
    ) -> dict[str, Any]: ...
