"""Tests for ``loam.database.orm``: the Orm façade across named connections."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from loam import Context, Orm, create_orm
from loam.core.errors import UnknownConnectionError
from loam.database import Query, observers
from tests._support.models import AVATAR_KEY, User, UserObserver


class TestConnectionSelection:
    def test_default_connection(self, orm):
        assert orm.connection_name == "sqlite"
        assert orm.query().connection_name == "sqlite"

    def test_connection_binds_name(self, orm, connection_names):
        for name in connection_names:
            assert orm.connection(name).query().connection_name == name

    def test_connection_is_idempotent(self, orm, connection_names):
        for name in connection_names:
            once = orm.connection(name)
            twice = once.connection(name)
            assert twice == once
            assert twice.query().connection_name == once.query().connection_name == name

    def test_connection_none_selects_default(self, orm):
        assert orm.connection("reporting").connection(None).connection_name == "sqlite"

    def test_connection_does_not_mutate_receiver(self, orm):
        orm.connection("reporting")
        assert orm.connection_name == "sqlite"

    def test_unknown_connection_fails_fast(self, orm):
        with pytest.raises(UnknownConnectionError) as exc_info:
            orm.connection("missing")
        assert exc_info.value.name == "missing"
        assert exc_info.value.available == ["archive", "reporting", "sqlite"]

    def test_empty_name_is_unknown(self, orm):
        with pytest.raises(UnknownConnectionError) as exc_info:
            orm.connection("")
        assert exc_info.value.name == ""

    def test_unknown_default_rejected(self, orm):
        with pytest.raises(UnknownConnectionError):
            Orm(connections=orm.connections, observers=orm.observers, connection_name="missing")

    def test_connections_are_isolated(self, orm):
        orm.connection("reporting").query().create(User(name="only-reporting"))

        assert len(orm.connection("reporting").query().find(User)) == 1
        assert orm.connection("sqlite").query().find(User) == []
        assert orm.connection("archive").query().find(User) == []


class TestWithContext:
    def test_query_carries_context(self, orm):
        ctx = Context.background().with_value("k", "v")
        assert orm.with_context(ctx).query().context is ctx

    def test_default_context_is_background(self, orm):
        assert orm.query().context is Context.background()

    def test_order_independent(self, orm, connection_names):
        ctx = Context.background().with_value("k", "v")
        for name in connection_names:
            first = orm.with_context(ctx).connection(name)
            second = orm.connection(name).with_context(ctx)
            assert first == second

            q1, q2 = first.query(), second.query()
            assert q1.connection_name == q2.connection_name == name
            assert q1.context is q2.context is ctx

    def test_with_context_keeps_connection(self, orm):
        ctx = Context.background().with_value("k", "v")
        assert orm.connection("archive").with_context(ctx).connection_name == "archive"

    def test_with_context_does_not_mutate_receiver(self, orm):
        orm.with_context(Context.background().with_value("k", "v"))
        assert orm.context is Context.background()


class TestConcurrentQuery:
    def test_query_from_many_threads(self, orm, connection_names):
        barrier = threading.Barrier(8)

        def resolve(name: str) -> list[str]:
            facade = orm.connection(name)
            barrier.wait()
            return [facade.query().connection_name for _ in range(200)]

        names = [connection_names[i % len(connection_names)] for i in range(8)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(resolve, names))

        for name, resolved in zip(names, results):
            assert set(resolved) == {name}

    def test_concurrent_creates_land_on_bound_connection(self, orm):
        def create(i: int) -> None:
            orm.connection("reporting").query().create(User(name=f"u{i}"))

        with ThreadPoolExecutor(max_workers=4) as pool:
            list(pool.map(create, range(20)))

        assert len(orm.connection("reporting").query().find(User)) == 20
        assert orm.query().find(User) == []


class TestTransaction:
    def test_success_commits(self, orm, connection_names):
        for name in connection_names:
            user = User(name="transaction_success_user", avatar="transaction_success_avatar")
            user1 = User(name="transaction_success_user1", avatar="transaction_success_avatar1")

            def work(tx: Query) -> None:
                tx.create(user)
                tx.create(user1)

            assert orm.connection(name).transaction(work) is None

            query = orm.connection(name).query()
            assert [u.name for u in query.find(User, user.id)] == ["transaction_success_user"]
            assert [u.name for u in query.find(User, user1.id)] == ["transaction_success_user1"]

    def test_error_rolls_back(self, orm, connection_names):
        for name in connection_names:
            raised = RuntimeError("error")

            def work(tx: Query) -> None:
                tx.create(User(name="transaction_error_user", avatar="transaction_error_avatar"))
                tx.create(User(name="transaction_error_user1", avatar="transaction_error_avatar1"))
                raise raised

            with pytest.raises(RuntimeError) as exc_info:
                orm.connection(name).transaction(work)

            assert exc_info.value is raised
            assert orm.connection(name).query().find(User) == []

    def test_records_usable_after_commit(self, orm, connection_names):
        for name in connection_names:
            a, b = orm.connection(name).transaction(
                lambda tx: (tx.create(User(name="a")), tx.create(User(name="b")))
            )

            stored = orm.connection(name).query().find(User, a.id, b.id)
            assert [u.name for u in stored] == ["a", "b"]

    def test_returns_fn_result(self, orm):
        assert orm.transaction(lambda tx: tx.create(User(name="r")).name) == "r"

    def test_uses_bound_connection(self, orm):
        orm.connection("archive").transaction(lambda tx: tx.create(User(name="archived")))

        assert len(orm.connection("archive").query().find(User)) == 1
        assert orm.query().find(User) == []

    def test_uses_bound_context(self, orm):
        ctx = Context.background().with_value("k", "v")
        seen = []
        orm.with_context(ctx).transaction(lambda tx: seen.append(tx.context))
        assert seen == [ctx]


class TestObserve:
    def test_registers_in_shared_registry(self, orm):
        observer = UserObserver()
        orm.observe(User, observer)

        assert orm.observers is observers
        assert [(e.model, e.observer) for e in observers.entries] == [(User, observer)]

    def test_accepts_instance_as_model(self, orm):
        orm.observe(User(), UserObserver())
        assert observers.entries[0].model is User

    def test_observer_error_on_every_connection(self, orm, connection_names):
        observer = UserObserver()
        orm.observe(User, observer)

        for name in connection_names:
            with pytest.raises(RuntimeError) as exc_info:
                orm.connection(name).query().create(User(name="observer_name"))

            assert str(exc_info.value) == "error"
            assert exc_info.value is observer.raised
            assert orm.connection(name).query().with_trashed().find(User) == []

    def test_registration_visible_to_existing_facades(self, orm):
        derived = orm.connection("reporting").with_context(Context.background().with_value("k", "v"))
        orm.observe(User, UserObserver())

        with pytest.raises(RuntimeError):
            derived.query().create(User(name="observer_name"))

    def test_set_attribute_from_context_on_all_paths(self, orm, connection_names):
        orm.observe(User, UserObserver())
        ctx = Context.background().with_value(AVATAR_KEY, "with_context_avatar")

        user = orm.with_context(ctx).query().create(User(name="with_context_name"))
        assert user.name == "with_context_name"
        assert user.avatar == "with_context_avatar"

        for name in connection_names:
            via_connection_first = User(name="with_context_name")
            orm.connection(name).with_context(ctx).query().create(via_connection_first)

            via_context_first = User(name="with_context_name")
            orm.with_context(ctx).connection(name).query().create(via_context_first)

            assert via_connection_first.avatar == via_context_first.avatar == "with_context_avatar"

            stored = orm.connection(name).query().find(User, via_connection_first.id, via_context_first.id)
            assert [u.avatar for u in stored] == ["with_context_avatar", "with_context_avatar"]

    def test_no_context_value_leaves_attribute(self, orm):
        orm.observe(User, UserObserver())
        user = orm.query().create(User(name="with_context_name", avatar="own.png"))
        assert user.avatar == "own.png"


class TestRawHandleAndFactory:
    def test_db_returns_engine_of_bound_connection(self, orm, tmp_path):
        engine = orm.connection("archive").db()
        assert engine.url.database == str(tmp_path / "archive.db")

    def test_factory_creates_on_bound_connection(self, orm):
        orm.connection("reporting").factory().count(2).create(User)
        assert len(orm.connection("reporting").query().find(User)) == 2


class TestCreateOrm:
    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOAM_DEFAULT", "main")
        monkeypatch.setenv(
            "LOAM_CONNECTIONS",
            '{"main": {"driver": "sqlite", "path": "%s"}}' % (tmp_path / "main.db").as_posix(),
        )
        orm = create_orm()
        try:
            assert orm.connection_name == "main"
            assert orm.connections.names() == ["main"]
        finally:
            orm.close()

    def test_explicit_observer_registry(self, settings):
        from loam.database import ObserverRegistry

        registry = ObserverRegistry()
        orm = create_orm(settings, observers=registry)
        try:
            assert orm.observers is registry
            assert orm.query().dispatcher.registry is registry
        finally:
            orm.close()
