"""In-memory provider client for sync tests."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Any, Optional

from ledgerline.domain.integration.ports import (
    Provider,
    ProviderClient,
    ProviderRegistry,
)
from ledgerline.infrastructure.providers.simplefin import SimplefinMapper


class FakeProviderClient(ProviderClient):
    """
    Serves canned SimpleFin-shaped payloads.

    ``transactions`` maps a provider account id to its raw transactions,
    filtered by ``posted`` date per requested window. ``failures`` maps an
    account id to an exception raised on every fetch; ``delays`` maps it to
    seconds slept before answering.
    """

    def __init__(
        self,
        accounts: Optional[list[Any]] = None,
        transactions: Optional[dict[str, Any]] = None,
        failures: Optional[dict[str, Exception]] = None,
        delays: Optional[dict[str, float]] = None,
        accounts_error: Optional[Exception] = None,
    ):
        self.accounts = accounts or []
        self.transactions = transactions or {}
        self.failures = failures or {}
        self.delays = delays or {}
        self.accounts_error = accounts_error
        self.calls: list[tuple[str, date, date]] = []
        self.closed = False

    async def list_accounts(self) -> list[Any]:
        if self.accounts_error is not None:
            raise self.accounts_error
        return self.accounts

    async def list_transactions(
        self,
        account_id: str,
        start_date: date,
        end_date: date,
    ) -> Any:
        self.calls.append((account_id, start_date, end_date))
        if account_id in self.delays:
            await asyncio.sleep(self.delays[account_id])
        if account_id in self.failures:
            raise self.failures[account_id]

        payload = self.transactions.get(account_id, [])
        if not isinstance(payload, list):
            return payload
        return [
            raw
            for raw in payload
            if not isinstance(raw, dict)
            or not isinstance(raw.get("posted"), str)
            or start_date <= date.fromisoformat(raw["posted"][:10]) <= end_date
        ]

    async def close(self) -> None:
        self.closed = True


def simplefin_registry(client: ProviderClient) -> ProviderRegistry:
    """Registry whose SimpleFin provider always hands out ``client``."""
    return ProviderRegistry(
        [Provider(mapper=SimplefinMapper(), client_factory=lambda _: client)],
    )
