"""SQLAlchemy Repository 어댑터 테스트 (파일 기반 SQLite)"""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from adapters.db.repositories import AccountRepositoryAdapter, EntityRepositoryAdapter
from core.domain.exceptions import ConflictingAccountError


@pytest.mark.asyncio
class TestAccountRepository:
    async def test_upsert_creates_account(self, session):
        repo = AccountRepositoryAdapter(session)

        account = await repo.upsert_account(42, "Foo")

        assert account.external_user_id == 42
        assert account.display_name == "Foo"
        assert account.is_public is True
        assert await repo.find_by_id(account.id) == account

    async def test_upsert_is_idempotent(self, session):
        repo = AccountRepositoryAdapter(session)

        first = await repo.upsert_account(42, "Foo")
        second = await repo.upsert_account(42, "Foo")

        assert first.id == second.id
        assert len(await repo.list_all()) == 1

    async def test_upsert_updates_display_name(self, session):
        repo = AccountRepositoryAdapter(session)

        first = await repo.upsert_account(42, "Foo")
        renamed = await repo.upsert_account(42, "FooBar")

        assert renamed.id == first.id
        assert renamed.display_name == "FooBar"

    async def test_find_by_display_name_ignores_case(self, session):
        repo = AccountRepositoryAdapter(session)
        account = await repo.upsert_account(42, "Foo")

        found = await repo.find_by_display_name("fOO")

        assert found is not None
        assert found.id == account.id

    async def test_display_name_conflict_ignores_case(self, session):
        repo = AccountRepositoryAdapter(session)
        await repo.upsert_account(42, "Foo")

        with pytest.raises(ConflictingAccountError):
            await repo.upsert_account(43, "FOO")

        assert await repo.find_by_external_id(43) is None
        assert len(await repo.list_all()) == 1

    async def test_update_profile_changes_given_fields_only(self, session):
        repo = AccountRepositoryAdapter(session)
        account = await repo.upsert_account(42, "Foo")

        updated = await repo.update_profile(account.id, decoration=266001)
        assert updated.decoration == 266001
        assert updated.is_public is True

        updated = await repo.update_profile(account.id, is_public=False)
        assert updated.decoration == 266001
        assert updated.is_public is False

    async def test_update_profile_missing_account(self, session):
        repo = AccountRepositoryAdapter(session)

        assert await repo.update_profile(uuid4(), is_public=False) is None


@pytest.mark.asyncio
class TestEntityRepository:
    async def _account(self, session, external_user_id=42, name="Foo"):
        return await AccountRepositoryAdapter(session).upsert_account(external_user_id, name)

    async def test_upsert_entity_creates(self, session):
        account = await self._account(session)
        repo = EntityRepositoryAdapter(session)

        entity = await repo.upsert_entity(account.id, "puuid-1", "Faker", "KR1", "kr")

        assert entity.account_id == account.id
        assert entity.region == "KR"
        assert entity.riot_id == "Faker#KR1"
        assert entity.is_synced() is False
        assert [e.id for e in await repo.list_by_account(account.id)] == [entity.id]

    async def test_upsert_entity_rebinds_to_new_owner(self, session):
        first = await self._account(session, 42, "Foo")
        second = await self._account(session, 43, "Bar")
        repo = EntityRepositoryAdapter(session)

        original = await repo.upsert_entity(first.id, "puuid-1", "Faker", "KR1", "KR")
        rebound = await repo.upsert_entity(second.id, "puuid-1", "Hide on bush", "KR1", "KR")

        assert rebound.id == original.id
        assert rebound.account_id == second.id
        assert rebound.game_name == "Hide on bush"
        assert await repo.list_by_account(first.id) == []

    async def test_upsert_entity_statistics(self, session):
        account = await self._account(session)
        repo = EntityRepositoryAdapter(session)
        await repo.upsert_entity(account.id, "puuid-1", "Faker", "KR1", "KR")
        synced_at = datetime(2024, 1, 1, 12, 0, 0)

        updated = await repo.upsert_entity_statistics("puuid-1", '[{"champion_id":1}]', synced_at)

        assert updated is True
        entity = await repo.find_by_external_key("puuid-1")
        assert entity.stats_blob == '[{"champion_id":1}]'
        assert entity.last_sync == synced_at

    async def test_upsert_entity_statistics_missing(self, session):
        repo = EntityRepositoryAdapter(session)

        assert await repo.upsert_entity_statistics("missing", "[]", datetime.utcnow()) is False

    async def test_least_recently_synced_order(self, session):
        account = await self._account(session)
        repo = EntityRepositoryAdapter(session)
        now = datetime.utcnow()
        for key in ("recent", "old", "never"):
            await repo.upsert_entity(account.id, key, key, "TAG", "NA1")
        await repo.upsert_entity_statistics("recent", "[]", now)
        await repo.upsert_entity_statistics("old", "[]", now - timedelta(days=3))

        entities = await repo.list_least_recently_synced(2)

        assert [e.external_key for e in entities] == ["never", "old"]
