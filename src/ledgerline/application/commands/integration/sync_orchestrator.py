"""Sync every linked account of one provider connection."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import TYPE_CHECKING, Any, Optional

from ledgerline.application.dtos.integration import (
    CANCELLED_REASON,
    TIMEOUT_REASON,
    AccountProcessResult,
    SyncSummary,
)
from ledgerline.application.services.account_processor import (
    RECORD_MAPPING_ERRORS,
    AccountProcessor,
)
from ledgerline.domain.integration.exceptions import (
    ConnectionAuthenticationError,
    ProviderAuthenticationError,
    ProviderRequestError,
)
from ledgerline.domain.integration.services import DiscoverySnapshot, SyncWindowPlanner
from ledgerline.domain.integration.value_objects import SkippedAccount, SyncPlan
from ledgerline.domain.shared.text import excerpt
from ledgerline.domain.shared.time import today_utc

if TYPE_CHECKING:
    from ledgerline.application.factories import RepositoryFactory, UnitOfWork
    from ledgerline.domain.integration.entities import ProviderConnection
    from ledgerline.domain.integration.ports import (
        Provider,
        ProviderClient,
        ProviderRegistry,
    )
    from ledgerline.domain.ledger.entities import LinkedAccount
    from ledgerline_config import Settings

logger = logging.getLogger(__name__)

CREDENTIALS_REVOKED_REASON = "credentials revoked during sync"


class SyncOrchestrator:
    """Run one AccountProcessor per linked account and aggregate the results.

    Accounts run concurrently up to ``max_concurrency``, each in its own unit
    of work. Skipped accounts are the normal partial-success case; only
    connection-level errors fail a run.
    """

    def __init__(  # noqa: PLR0913
        self,
        factory: RepositoryFactory,
        unit_of_work: UnitOfWork,
        providers: ProviderRegistry,
        planner: SyncWindowPlanner,
        max_concurrency: int = 4,
        request_timeout_seconds: float = 30.0,
        account_timeout_seconds: float = 600.0,
        incremental_buffer_days: int = 7,
    ):
        if max_concurrency < 1:
            msg = f"max_concurrency must be at least 1, got {max_concurrency}"
            raise ValueError(msg)
        self._factory = factory
        self._unit_of_work = unit_of_work
        self._providers = providers
        self._planner = planner
        self._max_concurrency = max_concurrency
        self._request_timeout = request_timeout_seconds
        self._account_timeout = account_timeout_seconds
        self._incremental_buffer_days = incremental_buffer_days

    @classmethod
    def from_settings(
        cls,
        factory: RepositoryFactory,
        unit_of_work: UnitOfWork,
        providers: ProviderRegistry,
        settings: Settings,
    ) -> SyncOrchestrator:
        return cls(
            factory=factory,
            unit_of_work=unit_of_work,
            providers=providers,
            planner=SyncWindowPlanner(settings.sync_lookback_cap_days),
            max_concurrency=settings.sync_max_concurrency,
            request_timeout_seconds=settings.sync_request_timeout_seconds,
            account_timeout_seconds=settings.sync_account_timeout_seconds,
            incremental_buffer_days=settings.sync_incremental_buffer_days,
        )

    async def run(
        self,
        connection: ProviderConnection,
        lookback_start: Optional[date] = None,
        cancel_event: Optional[asyncio.Event] = None,
        today: Optional[date] = None,
    ) -> SyncSummary:
        """
        Sync all linked accounts of ``connection``.

        Parameters
        ----------
        connection
            The provider connection to sync
        lookback_start
            Oldest date to fetch; derived from the last sync when omitted
        cancel_event
            When set, account tasks that have not started are skipped
        today
            Newest date to fetch; defaults to today (UTC)

        Returns
        -------
        SyncSummary with per-account counts, skipped and unlinked accounts
        and the discovery snapshot

        Raises
        ------
        ConnectionAuthenticationError
            If the connection needs re-authentication, before or during the run
        ProviderConfigurationError
            If no provider is registered for the connection's source
        """
        if connection.requires_update:
            raise ConnectionAuthenticationError(
                connection.id,
                "connection is marked as requiring an update",
            )
        provider = self._providers.get(connection.source)

        today = today or today_utc()
        requested_start = lookback_start or connection.default_lookback_start(
            today,
            self._planner.lookback_cap_days,
            self._incremental_buffer_days,
        )
        plan = self._planner.plan(requested_start, provider.mapper.max_window_days, today)

        client = provider.client_for(connection)
        try:
            return await self._run(connection, provider, client, plan, cancel_event)
        finally:
            await client.close()

    async def _run(
        self,
        connection: ProviderConnection,
        provider: Provider,
        client: ProviderClient,
        plan: SyncPlan,
        cancel_event: Optional[asyncio.Event],
    ) -> SyncSummary:
        summary = SyncSummary(
            connection_id=connection.id,
            requested_start=plan.requested_start,
            effective_start=plan.effective_start,
            truncated=plan.truncated,
        )
        logger.info(
            "Syncing connection %s (%s) from %s, windows of %d days",
            connection.id,
            connection.source.value,
            plan.effective_start,
            plan.max_window_days,
        )

        try:
            raw_accounts = await asyncio.wait_for(
                client.list_accounts(),
                timeout=self._request_timeout,
            )
        except ProviderAuthenticationError as e:
            await self._require_update(connection)
            raise ConnectionAuthenticationError(connection.id, e.message) from e
        except (ProviderRequestError, asyncio.TimeoutError) as e:
            message = str(e) or TIMEOUT_REASON
            logger.error("Listing accounts of connection %s failed: %s", connection.id, message)
            summary.fail(message)
            return summary

        if not isinstance(raw_accounts, list):
            logger.error(
                "Malformed account list for connection %s: %s",
                connection.id,
                excerpt(raw_accounts),
            )
            summary.fail("malformed account list")
            return summary

        accounts = await self._link_accounts(connection, provider, raw_accounts, summary)

        snapshot = DiscoverySnapshot()
        revoked = asyncio.Event()
        semaphore = asyncio.Semaphore(self._max_concurrency)
        results = await asyncio.gather(
            *(
                self._run_account(
                    account,
                    plan,
                    provider,
                    client,
                    snapshot,
                    semaphore,
                    cancel_event,
                    revoked,
                )
                for account in accounts
            ),
        )
        for result in results:
            summary.add_result(result)

        if snapshot.recorded:
            summary.first_chunk_snapshot = snapshot.payload
            connection.record_snapshot(snapshot.payload)

        if revoked.is_set():
            summary.fail(CREDENTIALS_REVOKED_REASON)
            await self._require_update(connection)
            raise ConnectionAuthenticationError(
                connection.id,
                CREDENTIALS_REVOKED_REASON,
                summary=summary,
            )

        connection.mark_synced()
        await self._factory.connection_repository().save(connection)
        await self._factory.commit()

        logger.info(
            "Connection %s synced: %d accounts, %d imported, %d skipped",
            connection.id,
            summary.accounts_processed,
            summary.transactions_imported,
            summary.skipped_count,
        )
        return summary

    async def _link_accounts(
        self,
        connection: ProviderConnection,
        provider: Provider,
        raw_accounts: list[Any],
        summary: SyncSummary,
    ) -> list[LinkedAccount]:
        """Normalize raw accounts, refresh balances and pick the linked ones."""
        mapper = provider.mapper
        account_repo = self._factory.linked_account_repository()
        linked: list[LinkedAccount] = []

        for raw in raw_accounts:
            provider_account_id = mapper.provider_account_id(raw) or "unknown"
            embedded = mapper.extract_error(raw) if isinstance(raw, dict) else None
            if embedded:
                logger.warning(
                    "Provider reported an error for account %s: %s",
                    provider_account_id,
                    embedded,
                )
                summary.add_skipped(SkippedAccount(provider_account_id, embedded))
                continue

            try:
                normalized = mapper.normalize_account(raw)
            except RECORD_MAPPING_ERRORS as e:
                logger.warning(
                    "Malformed account payload %s: %s | payload=%s",
                    provider_account_id,
                    e,
                    excerpt(raw),
                )
                summary.add_skipped(
                    SkippedAccount(provider_account_id, f"malformed account payload: {e}"),
                )
                continue

            account = await account_repo.find_by_provider_account_id(
                connection.id,
                normalized.provider_account_id,
            )
            if account is None:
                logger.info(
                    "Account %s of connection %s is not linked yet",
                    normalized.provider_account_id,
                    connection.id,
                )
                summary.unlinked_accounts.append(normalized.provider_account_id)
                continue

            account.update_balance(
                normalized.current_balance,
                normalized.available_balance,
                normalized.balance_date,
            )
            await account_repo.save(account)
            linked.append(account)

        await self._factory.commit()
        return linked

    async def _run_account(  # noqa: PLR0913
        self,
        account: LinkedAccount,
        plan: SyncPlan,
        provider: Provider,
        client: ProviderClient,
        snapshot: DiscoverySnapshot,
        semaphore: asyncio.Semaphore,
        cancel_event: Optional[asyncio.Event],
        revoked: asyncio.Event,
    ) -> AccountProcessResult:
        async with semaphore:
            if revoked.is_set() or (cancel_event is not None and cancel_event.is_set()):
                logger.info("Not starting account %s: %s", account.id, CANCELLED_REASON)
                return AccountProcessResult.skipped_before_start(
                    account.id,
                    account.provider_account_id,
                    CANCELLED_REASON,
                )

            result = AccountProcessResult.for_account(account)
            try:
                async with self._unit_of_work() as factory:
                    processor = AccountProcessor(
                        factory=factory,
                        mapper=provider.mapper,
                        client=client,
                        request_timeout_seconds=self._request_timeout,
                        snapshot=snapshot,
                    )
                    return await asyncio.wait_for(
                        processor.process(account, plan, result),
                        timeout=self._account_timeout,
                    )
            except asyncio.TimeoutError:
                logger.warning(
                    "Account %s exceeded %ss and was skipped",
                    account.id,
                    self._account_timeout,
                )
                reason = TIMEOUT_REASON
            except ProviderAuthenticationError as e:
                logger.warning(
                    "Credentials rejected while syncing account %s: %s",
                    account.id,
                    e,
                )
                revoked.set()
                reason = CREDENTIALS_REVOKED_REASON
            except Exception as e:
                logger.exception("Sync failed for account %s: %s", account.id, e)
                reason = str(e) or type(e).__name__

            # Windows committed before the failure stay counted
            result.mark_skipped(reason)
            return result

    async def _require_update(self, connection: ProviderConnection) -> None:
        connection.mark_requires_update()
        await self._factory.connection_repository().save(connection)
        await self._factory.commit()
        logger.warning("Connection %s now requires re-authentication", connection.id)
