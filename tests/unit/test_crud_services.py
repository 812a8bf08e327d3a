"""Tests for environment, collection, active environment and history services."""

from chainpost.db.repository import InMemoryRepository
from chainpost.models import Collection, Environment, RequestHistoryEntry
from chainpost.services.active_environment_service import ActiveEnvironmentService
from chainpost.services.history_service import RequestHistoryService
from chainpost.services.secret_variables_service import COLLECTION_SCOPE, ENVIRONMENT_SCOPE


class TestEnvironmentService:
    async def test_secrets_are_not_stored_with_entity(self, environment_service, secret_variables_service) -> None:
        env = Environment(name="Prod", variables={"host": "prod", "password": "hunter2"}, secret_variable_names={"password"})

        created = await environment_service.create(env)

        stored = await environment_service.repository.get_by_id(created.id)
        assert stored.variables == {"host": "prod"}
        assert await secret_variables_service.get_secrets(ENVIRONMENT_SCOPE, created.id) == {"password": "hunter2"}
        assert created.variables == {"host": "prod", "password": "hunter2"}

    async def test_get_merges_secrets_back(self, environment_service) -> None:
        env = await environment_service.create(
            Environment(name="Prod", variables={"host": "prod", "password": "hunter2"}, secret_variable_names={"password"})
        )

        loaded = await environment_service.get(env.id)

        assert loaded.variables == {"host": "prod", "password": "hunter2"}

    async def test_get_all_returns_plain_variables_only(self, environment_service) -> None:
        await environment_service.create(
            Environment(name="Prod", variables={"host": "prod", "password": "x"}, secret_variable_names={"password"})
        )
        (listed,) = await environment_service.get_all()
        assert listed.variables == {"host": "prod"}

    async def test_update_moves_values_between_stores(self, environment_service, secret_variables_service) -> None:
        env = await environment_service.create(Environment(name="Dev", variables={"token": "abc"}))

        env.secret_variable_names = {"token"}
        await environment_service.update(env)

        stored = await environment_service.repository.get_by_id(env.id)
        assert stored.variables == {}
        assert await secret_variables_service.get_secrets(ENVIRONMENT_SCOPE, env.id) == {"token": "abc"}
        assert (await environment_service.get(env.id)).variables == {"token": "abc"}

    async def test_delete_removes_secrets(self, environment_service, secret_variables_service) -> None:
        env = await environment_service.create(
            Environment(name="Dev", variables={"token": "abc"}, secret_variable_names={"token"})
        )

        await environment_service.delete(env.id)

        assert await environment_service.get(env.id) is None
        assert await secret_variables_service.get_secrets(ENVIRONMENT_SCOPE, env.id) == {}


class TestCollectionService:
    async def test_children_sorted_by_name(self, collection_service) -> None:
        parent = await collection_service.create(Collection(name="Root"))
        await collection_service.create(Collection(name="beta", parent_collection_id=parent.id))
        await collection_service.create(Collection(name="Alpha", parent_collection_id=parent.id))

        children = await collection_service.get_children(parent.id)
        roots = await collection_service.get_children(None)

        assert [c.name for c in children] == ["Alpha", "beta"]
        assert [c.name for c in roots] == ["Root"]

    async def test_collection_secrets_use_collection_scope(self, collection_service, secret_variables_service) -> None:
        coll = await collection_service.create(
            Collection(name="API", variables={"apiKey": "k"}, secret_variable_names={"apiKey"})
        )
        assert await secret_variables_service.get_secrets(COLLECTION_SCOPE, coll.id) == {"apiKey": "k"}
        assert await secret_variables_service.get_secrets(ENVIRONMENT_SCOPE, coll.id) == {}


class TestActiveEnvironmentService:
    async def test_tracks_active_environment(self, environment_service) -> None:
        service = ActiveEnvironmentService(environment_service)
        env = await environment_service.create(
            Environment(name="Dev", variables={"token": "abc"}, secret_variable_names={"token"})
        )

        assert await service.get_active_environment() is None
        await service.set_active_environment_id(env.id)

        active = await service.get_active_environment()
        assert active.id == env.id
        assert active.variables == {"token": "abc"}


class TestRequestHistoryService:
    async def test_keeps_newest_entries_first(self) -> None:
        service = RequestHistoryService(InMemoryRepository(), max_entries=3)
        for i in range(5):
            await service.add_entry(RequestHistoryEntry(request_name=f"r{i}"))

        history = await service.get_history()

        assert [e.request_name for e in history] == ["r4", "r3", "r2"]
        assert len(await service.repository.get_all()) == 3

    async def test_max_count_limits_result(self) -> None:
        service = RequestHistoryService(InMemoryRepository(), max_entries=10)
        for i in range(4):
            await service.add_entry(RequestHistoryEntry(request_name=f"r{i}"))

        assert [e.request_name for e in await service.get_history(2)] == ["r3", "r2"]

    async def test_clear(self) -> None:
        service = RequestHistoryService(InMemoryRepository(), max_entries=10)
        await service.add_entry(RequestHistoryEntry(request_name="r"))

        await service.clear()

        assert await service.get_history() == []
