"""Query -- CRUD, lifecycle dispatch and transactions for one connection.

Manifesto:
    A ``Query`` is bound to exactly one backend, one request context and, at
    most, one open transaction.  It is immutable by convention: ``with_context``,
    ``with_trashed`` and ``begin`` return new values sharing the same engine,
    so a single ``Query`` can be used from many threads at once.

    Outside a transaction every operation runs in its own short-lived session
    that commits on success and rolls back on any exception.  Inside a
    transaction every operation flushes into the transaction's session and
    nothing is committed until the transaction ends.

Pipelines::

    find / first    load                              -> retrieved
    create          saving -> creating -> INSERT      -> created -> saved
    update          saving -> updating -> UPDATE      -> updated -> saved
    delete          deleting -> soft/hard DELETE      -> deleted
    force_delete    force_deleting -> DELETE          -> force_deleted

    A "before" hook that raises stops the pipeline before the session is
    touched.  "After" hooks run inside the same session, before the commit,
    so an exception from any hook means nothing is written.

Transactions::

    def transfer(tx: Query) -> None:
        tx.update(debit)
        tx.update(credit)

    query.transaction(transfer)        # commit, or rollback + re-raise

    with query.atomic() as tx:         # same semantics as a context manager
        tx.create(audit)

Tags:
    loam, query, crud, transactions, lifecycle-hooks

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import inspect, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql import ClauseElement, Select

from loam.core.adapters.types import DriverKind
from loam.core.errors import DatabaseConnectionError, RecordStateError, TransactionError
from loam.core.logging import get_logger
from loam.core.orm.base import is_soft_deletable, utcnow
from loam.core.orm.session import session_factory

from .context import Context
from .dispatcher import EventDispatcher
from .events import Event, Hook

if TYPE_CHECKING:
    from .factory import Factory

logger = get_logger(__name__)

M = TypeVar("M")
R = TypeVar("R")


class _TransactionState:
    """The session behind one transaction and whether it has ended."""

    __slots__ = ("session", "finished")

    def __init__(self, session: Session):
        self.session = session
        self.finished = False

    def finish(self) -> None:
        self.finished = True
        self.session.close()


class Query:
    """
    Operations against one named connection.

    Obtain one from ``Orm.query()`` rather than constructing it directly.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        connection: str,
        dispatcher: EventDispatcher,
        driver: DriverKind | None = None,
        context: Context | None = None,
        sessions: sessionmaker[Any] | None = None,
        _transaction: _TransactionState | None = None,
        _with_trashed: bool = False,
    ):
        self._engine = engine
        self._connection = connection
        self._dispatcher = dispatcher
        self._driver = driver
        self._context = context or Context.background()
        self._sessions = sessions or session_factory(engine)
        self._transaction = _transaction
        self._with_trashed = _with_trashed

    def _replace(self, **changes: Any) -> Query:
        kwargs: dict[str, Any] = {
            "connection": self._connection,
            "dispatcher": self._dispatcher,
            "driver": self._driver,
            "context": self._context,
            "sessions": self._sessions,
            "_transaction": self._transaction,
            "_with_trashed": self._with_trashed,
        }
        kwargs.update(changes)
        return Query(self._engine, **kwargs)

    # ── Properties / withers ──────────────────────────────────────────

    @property
    def connection_name(self) -> str:
        return self._connection

    @property
    def driver(self) -> DriverKind | None:
        return self._driver

    @property
    def context(self) -> Context:
        return self._context

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None and not self._transaction.finished

    def with_context(self, context: Context) -> Query:
        """Copy of this query whose backend calls and events use *context*."""
        return self._replace(context=context)

    def with_trashed(self) -> Query:
        """Copy of this query whose reads include soft-deleted records."""
        return self._replace(_with_trashed=True)

    # ── Raw handle / factory ──────────────────────────────────────────

    def db(self) -> Engine:
        """Live engine for this connection.

        Raises:
            DatabaseConnectionError: the backend cannot be reached
        """
        self._context.raise_if_done()
        try:
            with self._engine.connect():
                pass
        except SQLAlchemyError as exc:
            raise DatabaseConnectionError(
                f"Cannot reach database for connection {self._connection!r}: {exc}",
                cause=exc,
            ).with_context(
                connection=self._connection,
                driver=self._driver.value if self._driver else None,
            ) from exc
        return self._engine

    def factory(self) -> Factory:
        from .factory import Factory

        return Factory(self)

    def dispose(self) -> None:
        """Close every pooled connection of the engine."""
        self._engine.dispose()

    # ── Sessions ──────────────────────────────────────────────────────

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        self._context.raise_if_done()

        if self._transaction is not None:
            self._ensure_active("use")
            yield self._transaction.session
            return

        session = self._sessions()
        try:
            yield session
            self._context.raise_if_done()
            session.commit()
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def _ensure_active(self, action: str) -> _TransactionState:
        if self._transaction is None:
            raise TransactionError(f"cannot {action}: query is not in a transaction").with_context(
                connection=self._connection
            )
        if self._transaction.finished:
            raise TransactionError(f"cannot {action}: transaction already finished").with_context(
                connection=self._connection
            )
        return self._transaction

    def _event(self, record: Any) -> Event:
        return Event(record, context=self._context, query=self)

    def _dispatch(self, hook: Hook, event: Event) -> None:
        self._dispatcher.dispatch(hook, event)

    # ── Reads ─────────────────────────────────────────────────────────

    def _select(self, model: type[M], conditions: tuple[Any, ...]) -> Select[tuple[M]]:
        stmt = select(model)
        primary_key = inspect(model).primary_key
        ids: list[Any] = []

        for condition in conditions:
            if isinstance(condition, ClauseElement):
                stmt = stmt.where(condition)
            elif isinstance(condition, (list, tuple, set, frozenset)):
                ids.extend(condition)
            else:
                ids.append(condition)

        if ids:
            if len(primary_key) != 1:
                raise ValueError(f"{model.__name__} has a composite primary key; pass expressions instead of ids")
            stmt = stmt.where(primary_key[0].in_(ids))

        if is_soft_deletable(model) and not self._with_trashed:
            stmt = stmt.where(model.deleted_at.is_(None))  # type: ignore[attr-defined]

        return stmt.order_by(*primary_key)

    def find(self, model: type[M], *conditions: Any) -> list[M]:
        """Records of *model* matching *conditions*.

        Conditions are primary key values (or lists of them) and/or
        SQLAlchemy expressions.  No conditions returns every record.
        ``retrieved`` fires for each loaded record.
        """
        stmt = self._select(model, conditions)
        with self._session_scope() as session:
            records = list(session.scalars(stmt).all())
        for record in records:
            self._dispatch(Hook.RETRIEVED, self._event(record))
        return records

    def first(self, model: type[M], *conditions: Any) -> M | None:
        """First matching record (by primary key), or ``None``."""
        stmt = self._select(model, conditions).limit(1)
        with self._session_scope() as session:
            record = session.scalars(stmt).first()
        if record is not None:
            self._dispatch(Hook.RETRIEVED, self._event(record))
        return record

    # ── Writes ────────────────────────────────────────────────────────

    def _require_persisted(self, record: Any, operation: str) -> None:
        if inspect(record).key is None:
            raise RecordStateError(
                f"cannot {operation} a {type(record).__name__} that has not been created"
            ).with_context(connection=self._connection, model=type(record).__name__, operation=operation)

    def create(self, record: M) -> M:
        """Insert *record*: saving -> creating -> INSERT -> created -> saved."""
        event = self._event(record)
        self._dispatch(Hook.SAVING, event)
        self._dispatch(Hook.CREATING, event)

        with self._session_scope() as session:
            session.add(record)
            session.flush()
            self._dispatch(Hook.CREATED, event)
            self._dispatch(Hook.SAVED, event)
        return record

    def update(self, record: M) -> M:
        """Persist changes to *record*: saving -> updating -> UPDATE -> updated -> saved."""
        self._require_persisted(record, "update")
        event = self._event(record)
        self._dispatch(Hook.SAVING, event)
        self._dispatch(Hook.UPDATING, event)

        with self._session_scope() as session:
            session.add(record)
            session.flush()
            self._dispatch(Hook.UPDATED, event)
            self._dispatch(Hook.SAVED, event)
        return record

    def delete(self, record: Any) -> None:
        """Delete *record*: deleting -> DELETE -> deleted.

        Models using ``SoftDeletes`` get ``deleted_at`` stamped instead.
        """
        self._require_persisted(record, "delete")
        event = self._event(record)
        self._dispatch(Hook.DELETING, event)

        with self._session_scope() as session:
            if is_soft_deletable(type(record)):
                record.deleted_at = utcnow()
                session.add(record)
            else:
                session.delete(record)
            session.flush()
            self._dispatch(Hook.DELETED, event)

    def force_delete(self, record: Any) -> None:
        """Permanently delete *record*: force_deleting -> DELETE -> force_deleted."""
        self._require_persisted(record, "force delete")
        event = self._event(record)
        self._dispatch(Hook.FORCE_DELETING, event)

        with self._session_scope() as session:
            session.delete(record)
            session.flush()
            self._dispatch(Hook.FORCE_DELETED, event)

    # ── Transactions ──────────────────────────────────────────────────

    def begin(self) -> Query:
        """Start a transaction and return the query bound to it.

        The caller must finish it with :meth:`commit` or :meth:`rollback`.
        """
        if self._transaction is not None:
            raise TransactionError("transaction already in progress on this query").with_context(
                connection=self._connection
            )
        self._context.raise_if_done()
        session = self._sessions()
        session.begin()
        logger.debug("transaction_begin", connection=self._connection)
        return self._replace(_transaction=_TransactionState(session))

    def commit(self) -> None:
        """Commit the transaction this query is bound to."""
        state = self._ensure_active("commit")
        try:
            self._context.raise_if_done()
            state.session.commit()
        except BaseException as exc:
            self._rollback_after_failure(state, exc)
            raise
        finally:
            state.finish()
        logger.debug("transaction_commit", connection=self._connection)

    def rollback(self) -> None:
        """Roll back the transaction this query is bound to."""
        state = self._ensure_active("rollback")
        try:
            state.session.rollback()
        finally:
            state.finish()
        logger.debug("transaction_rollback", connection=self._connection)

    def _rollback_after_failure(self, state: _TransactionState, error: BaseException) -> None:
        # The original error is what the caller sees; a failed rollback is only logged.
        try:
            state.session.rollback()
        except Exception as rollback_exc:
            logger.error(
                "transaction_rollback_failed",
                connection=self._connection,
                error=str(error),
                rollback_error=str(rollback_exc),
            )
        else:
            logger.debug(
                "transaction_rollback",
                connection=self._connection,
                error_type=type(error).__name__,
            )

    @contextmanager
    def atomic(self) -> Iterator[Query]:
        """Transaction as a context manager: commit on exit, rollback on any exception."""
        tx = self.begin()
        state = tx._ensure_active("start atomic block")
        try:
            yield tx
        except BaseException as exc:
            if not state.finished:
                try:
                    self._rollback_after_failure(state, exc)
                finally:
                    state.finish()
            raise
        if not state.finished:
            tx.commit()

    def transaction(self, fn: Callable[[Query], R]) -> R:
        """Run ``fn(tx)`` in a transaction and return its result.

        A normal return commits; a commit failure propagates.  Any exception
        from *fn* (including ``KeyboardInterrupt``) rolls back and is
        re-raised unchanged.
        """
        with self.atomic() as tx:
            return fn(tx)

    def __repr__(self) -> str:
        driver = self._driver.value if self._driver else None
        return f"Query(connection={self._connection!r}, driver={driver!r}, in_transaction={self.in_transaction})"


__all__ = [
    "Query",
]
