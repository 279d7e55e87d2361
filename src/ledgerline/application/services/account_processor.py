"""Process one linked account: fetch, map, match and write, window by window.

Failures stay as local as possible:

- a timeout or provider request error skips this account only;
- a malformed or error-marked record skips that record only;
- an authentication failure concerns the whole connection and propagates.

Each window's writes are committed on their own. Replaying a window is safe
because matching is idempotent.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Iterable, Optional

from ledgerline.application.dtos.integration import (
    SYNC_IN_PROGRESS_REASON,
    TIMEOUT_REASON,
    AccountProcessResult,
)
from ledgerline.application.services.enrichment_ledger import EnrichmentLedger
from ledgerline.application.services.opening_anchor_manager import (
    OpeningAnchorManager,
)
from ledgerline.domain.integration.exceptions import (
    ProviderRequestError,
    RecordMappingError,
)
from ledgerline.domain.integration.services import (
    AccountLedgerIndex,
    DiscoverySnapshot,
    IdentityMatcher,
)
from ledgerline.domain.integration.value_objects import (
    AccountSyncState,
    MatchOutcome,
    MergeCandidate,
    NormalizedRecord,
    SyncWindow,
)
from ledgerline.domain.ledger.entities import Entry
from ledgerline.domain.ledger.value_objects import ExternalIdentity, TransactionPayload
from ledgerline.domain.shared.text import excerpt

if TYPE_CHECKING:
    from ledgerline.application.factories import RepositoryFactory
    from ledgerline.domain.integration.ports import ProviderClient, ProviderMapper
    from ledgerline.domain.ledger.entities import LinkedAccount
    from ledgerline.domain.ledger.repositories import (
        EntryRepository,
        LinkedAccountRepository,
    )

logger = logging.getLogger(__name__)

# Errors raised while mapping one record that only invalidate that record.
RECORD_MAPPING_ERRORS = (
    RecordMappingError,
    ValueError,
    KeyError,
    TypeError,
    AttributeError,
    ArithmeticError,
)


class AccountProcessor:
    """Runs the per-account state machine for one sync run."""

    def __init__(  # noqa: PLR0913
        self,
        factory: RepositoryFactory,
        mapper: ProviderMapper,
        client: ProviderClient,
        request_timeout_seconds: float,
        snapshot: Optional[DiscoverySnapshot] = None,
        matcher: Optional[IdentityMatcher] = None,
    ):
        self._factory = factory
        self._entries: EntryRepository = factory.entry_repository()
        self._accounts: LinkedAccountRepository = factory.linked_account_repository()
        self._enrichment = EnrichmentLedger.from_factory(factory)
        self._anchors = OpeningAnchorManager.from_factory(factory)
        self._mapper = mapper
        self._client = client
        self._request_timeout = request_timeout_seconds
        self._snapshot = snapshot
        self._matcher = matcher or IdentityMatcher()

    async def process(
        self,
        account: LinkedAccount,
        windows: Iterable[SyncWindow],
        result: Optional[AccountProcessResult] = None,
    ) -> AccountProcessResult:
        """
        Import an account's transactions for the given windows.

        Parameters
        ----------
        account
            The linked account
        windows
            Windows in processing order; a SyncPlan is consumed lazily
        result
            Result to fill in; pass one to read the counts of committed
            windows when the call is cancelled

        Returns
        -------
        Counts and final state; skipped accounts carry a reason

        Raises
        ------
        ProviderAuthenticationError
            If the provider rejects the connection's credentials
        """
        if not await self._accounts.try_begin_sync(account.id):
            logger.info(
                "Skipping account %s (%s): %s",
                account.id,
                account.provider_account_id,
                SYNC_IN_PROGRESS_REASON,
            )
            result = result or AccountProcessResult.for_account(account)
            result.mark_skipped(SYNC_IN_PROGRESS_REASON)
            return result
        await self._factory.commit()

        result = result or AccountProcessResult.for_account(account)
        imported: list[Entry] = []
        try:
            await self._process_windows(account, windows, result, imported)
            await self._anchors.reconcile(
                account,
                imported,
                known_balance=account.current_balance,
            )
            await self._factory.commit()
        except (Exception, asyncio.CancelledError):
            await self._factory.rollback()
            raise
        finally:
            await self._accounts.end_sync(account.id)
            await self._factory.commit()

        logger.info(
            "Account %s %s: %d imported, %d duplicates, %d upgraded, %d failed",
            account.provider_account_id,
            result.state.value,
            result.imported,
            result.duplicates,
            result.upgraded,
            result.failed,
        )
        return result

    async def _process_windows(
        self,
        account: LinkedAccount,
        windows: Iterable[SyncWindow],
        result: AccountProcessResult,
        imported: list[Entry],
    ) -> None:
        state = AccountSyncState.PENDING

        for window in windows:
            state = state.transition_to(AccountSyncState.FETCHING)
            result.state = state
            try:
                raw_records = await asyncio.wait_for(
                    self._client.list_transactions(
                        account.provider_account_id,
                        window.start,
                        window.end,
                    ),
                    timeout=self._request_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Fetching account %s window %s timed out after %ss",
                    account.id,
                    window,
                    self._request_timeout,
                )
                self._skip(result, state, TIMEOUT_REASON)
                return
            except ProviderRequestError as e:
                logger.warning(
                    "Fetching account %s window %s failed: %s",
                    account.id,
                    window,
                    e,
                )
                self._skip(result, state, e.message)
                return

            result.windows.append(window)
            if self._snapshot is not None:
                self._snapshot.offer(raw_records, window, account.provider_account_id)

            state = state.transition_to(AccountSyncState.MAPPING)
            result.state = state
            account_error = (
                self._mapper.extract_error(raw_records)
                if isinstance(raw_records, dict)
                else None
            )
            if account_error:
                logger.warning(
                    "Provider reported an error for account %s window %s: %s",
                    account.id,
                    window,
                    account_error,
                )
                self._skip(result, state, account_error)
                return
            if not isinstance(raw_records, list):
                logger.warning(
                    "Malformed transaction payload for account %s window %s: %s",
                    account.id,
                    window,
                    excerpt(raw_records),
                )
                self._skip(result, state, "malformed transaction payload")
                return
            records = self._map_records(account, window, raw_records, result)

            state = state.transition_to(AccountSyncState.MATCHING)
            result.state = state
            # Counts join the result only once the window is committed
            window_result = AccountProcessResult.for_account(account)
            created = await self._match_and_write(account, records, window_result)
            await self._factory.commit()
            result.merge_counts(window_result)
            imported.extend(created)

        result.state = state.transition_to(AccountSyncState.DONE)

    def _map_records(
        self,
        account: LinkedAccount,
        window: SyncWindow,
        raw_records: list[Any],
        result: AccountProcessResult,
    ) -> list[NormalizedRecord]:
        records: list[NormalizedRecord] = []
        for raw in raw_records:
            embedded = self._mapper.extract_error(raw) if isinstance(raw, dict) else None
            if embedded:
                self._record_failed(result, account, window, raw, embedded)
                continue
            try:
                records.append(self._mapper.normalize_transaction(raw, account.currency))
            except RECORD_MAPPING_ERRORS as e:
                self._record_failed(result, account, window, raw, str(e))
        return records

    async def _match_and_write(
        self,
        account: LinkedAccount,
        records: list[NormalizedRecord],
        result: AccountProcessResult,
    ) -> list[Entry]:
        if not records:
            return []

        index = await self._load_index(account, records)
        created: list[Entry] = []

        for record in records:
            match = self._matcher.match(index, record)

            if match.outcome == MatchOutcome.NEW:
                entry = await self._create_entry(account, record, match.identity)
                index.add(entry)
                created.append(entry)
                result.imported += 1

            elif match.outcome == MatchOutcome.UPGRADE:
                entry = match.entry
                previous = entry.external_identity
                entry.assign_external_identity(match.identity)
                await self._entries.save(entry)
                index.reindex(entry, previous)
                result.upgraded += 1
                logger.debug(
                    "Upgraded entry %s identity %s -> %s",
                    entry.id,
                    previous,
                    match.identity,
                )

            elif match.outcome == MatchOutcome.DUPLICATE:
                result.duplicates += 1

            else:
                candidate = MergeCandidate.from_match(account.id, record, match.candidates)
                result.ambiguous.append(candidate)
                logger.info(
                    "Ambiguous match on account %s for %s: %d candidates",
                    account.id,
                    record,
                    len(match.candidates),
                )

        return created

    async def _load_index(
        self,
        account: LinkedAccount,
        records: list[NormalizedRecord],
    ) -> AccountLedgerIndex:
        identities = set()
        for record in records:
            for identity in (record.stable_identity(), record.fallback_identity()):
                if identity is not None:
                    identities.add(identity.value)
        dates = {record.date for record in records}

        entries = []
        if identities:
            entries.extend(
                await self._entries.find_by_external_ids(account.id, identities),
            )
        entries.extend(await self._entries.find_by_dates(account.id, dates))
        return AccountLedgerIndex(account.id, entries)

    async def _create_entry(
        self,
        account: LinkedAccount,
        record: NormalizedRecord,
        identity: Optional[ExternalIdentity],
    ) -> Entry:
        entry = Entry(
            account_id=account.id,
            date=record.date,
            amount=record.amount,
            currency=record.currency,
            description="",
            entryable=TransactionPayload(pending=record.pending),
            external_identity=identity,
        )
        await self._entries.save(entry)
        await self._enrichment.enrich(
            entry,
            record.settable_attributes(),
            record.source,
            metadata={
                "provider_account_id": account.provider_account_id,
                "pending": record.pending,
            },
        )
        return entry

    @staticmethod
    def _skip(
        result: AccountProcessResult,
        state: AccountSyncState,
        reason: str,
    ) -> None:
        result.state = state.transition_to(AccountSyncState.SKIPPED)
        result.reason = reason

    @staticmethod
    def _record_failed(
        result: AccountProcessResult,
        account: LinkedAccount,
        window: SyncWindow,
        raw: Any,
        reason: str,
    ) -> None:
        result.failed += 1
        logger.warning(
            "Skipping record on account %s window %s: %s | payload=%s",
            account.id,
            window,
            reason,
            excerpt(raw),
        )
