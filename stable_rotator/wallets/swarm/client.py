"""Swarm Vault REST client — holdings, swap preview/execute, transaction polling."""
from __future__ import annotations

import asyncio
import logging
import ssl
import time
from typing import Any, Callable

import aiohttp
import certifi

from ...config import SwarmVaultConfig

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("COMPLETED", "FAILED")


class SwarmVaultError(RuntimeError):
    """Error reported by (or while talking to) the Swarm Vault API."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.details = details


class SwarmVaultClient:
    """Thin async wrapper over the Swarm Vault manager API."""

    def __init__(self, config: SwarmVaultConfig) -> None:
        self.base_url = config.api_url.rstrip("/")
        self.api_key = config.api_key
        self.poll_interval = config.poll_interval_seconds
        self.wait_timeout = config.wait_timeout_seconds

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and unwrap the ``data`` envelope if present."""
        url = f"{self.base_url}{path}"
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.request(
                method,
                url,
                params=params,
                json=payload,
                headers=self._headers(),
                timeout=aiohttp.ClientTimeout(total=30),
            ) as response:
                try:
                    body = await response.json()
                except (aiohttp.ContentTypeError, ValueError):
                    body = {}

                if response.status >= 400 or (
                    isinstance(body, dict) and body.get("success") is False
                ):
                    error = (body.get("error") if isinstance(body, dict) else None) or {}
                    if isinstance(error, str):
                        error = {"message": error}
                    elif not isinstance(error, dict):
                        error = {}
                    raise SwarmVaultError(
                        error.get("message") or f"HTTP {response.status} from {path}",
                        error_code=error.get("code") or error.get("errorCode"),
                        details=error.get("details"),
                    )

                if isinstance(body, dict) and "data" in body:
                    return body["data"]
                return body

    async def get_holdings(
        self, swarm_id: str, include_members: bool = True
    ) -> dict[str, Any]:
        """Aggregate (and optionally per-member) token holdings of a swarm."""
        params = {"includeMembers": "true"} if include_members else None
        return await self._request("GET", f"/api/swarms/{swarm_id}/holdings", params=params)

    @staticmethod
    def _swap_payload(
        sell_token: str,
        buy_token: str,
        sell_percentage: int,
        slippage_percentage: float,
        membership_ids: list[str] | None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "sellToken": sell_token,
            "buyToken": buy_token,
            "sellPercentage": sell_percentage,
            "slippagePercentage": slippage_percentage,
        }
        if membership_ids:
            payload["membershipIds"] = membership_ids
        return payload

    async def preview_swap(
        self,
        swarm_id: str,
        sell_token: str,
        buy_token: str,
        sell_percentage: int = 100,
        slippage_percentage: float = 1.0,
        membership_ids: list[str] | None = None,
    ) -> dict[str, Any]:
        payload = self._swap_payload(
            sell_token, buy_token, sell_percentage, slippage_percentage, membership_ids
        )
        return await self._request(
            "POST", f"/api/swarms/{swarm_id}/swap/preview", payload=payload
        )

    async def execute_swap(
        self,
        swarm_id: str,
        sell_token: str,
        buy_token: str,
        sell_percentage: int = 100,
        slippage_percentage: float = 1.0,
        membership_ids: list[str] | None = None,
    ) -> dict[str, Any]:
        payload = self._swap_payload(
            sell_token, buy_token, sell_percentage, slippage_percentage, membership_ids
        )
        return await self._request(
            "POST", f"/api/swarms/{swarm_id}/swap/execute", payload=payload
        )

    async def get_transaction(self, transaction_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/api/transactions/{transaction_id}")

    async def wait_for_transaction(
        self,
        transaction_id: str,
        on_poll: Callable[[dict[str, Any]], None] | None = None,
    ) -> dict[str, Any]:
        """Poll until the transaction reaches a terminal status.

        Raises:
            SwarmVaultError: if ``wait_timeout`` elapses first.
        """
        deadline = time.monotonic() + self.wait_timeout

        while True:
            tx = await self.get_transaction(transaction_id)
            if on_poll is not None:
                on_poll(tx)

            if tx.get("status") in TERMINAL_STATUSES:
                return tx

            if time.monotonic() >= deadline:
                raise SwarmVaultError(
                    f"Timed out waiting for transaction {transaction_id}",
                    error_code="TIMEOUT",
                )
            await asyncio.sleep(self.poll_interval)
