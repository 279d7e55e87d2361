"""Tests for the SQLAlchemy provider connection repository."""

from ledgerline.domain.enrichment.value_objects import EnrichmentSource
from ledgerline.domain.integration.entities import ProviderConnection
from ledgerline.domain.integration.value_objects import ConnectionStatus


async def test_round_trip_with_snapshot(factory):
    repo = factory.connection_repository()
    connection = ProviderConnection(source=EnrichmentSource.SIMPLEFIN, name="Bridge")
    connection.record_snapshot({"accounts": [{"id": "A", "transactions": []}]})
    connection.mark_synced()
    await repo.save(connection)
    factory.session.expunge_all()

    loaded = await repo.find_by_id(connection.id)

    assert loaded == connection
    assert loaded.source == EnrichmentSource.SIMPLEFIN
    assert loaded.raw_snapshot == {"accounts": [{"id": "A", "transactions": []}]}
    assert loaded.last_synced_at.tzinfo is not None


async def test_status_update_and_find_all(factory):
    repo = factory.connection_repository()
    first = ProviderConnection(source=EnrichmentSource.SIMPLEFIN, name="One")
    second = ProviderConnection(source=EnrichmentSource.PLAID, name="Two")
    await repo.save(first)
    await repo.save(second)

    second.mark_requires_update()
    await repo.save(second)
    factory.session.expunge_all()

    loaded = await repo.find_all()
    assert {c.name for c in loaded} == {"One", "Two"}
    assert (await repo.find_by_id(second.id)).status == ConnectionStatus.REQUIRES_UPDATE
