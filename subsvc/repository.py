"""Storage of subscriptions in a SQL database."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Optional, Protocol

from sqlalchemy import (
    Column, Date, DateTime, Integer, MetaData, String, Table,
    create_engine, delete, func, insert, select, update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import Config
from .models import Subscription

metadata = MetaData()

subscriptions = Table(
    "subscriptions",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("service_name", String),
    Column("price", Integer, nullable=False),
    Column("user_id", String(36), nullable=False),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
)

_FIELDS = [column.name for column in subscriptions.columns]


class RepositoryError(Exception):
    """Raised when the database cannot carry out a request."""


@dataclass(frozen=True)
class SubscriptionFilter:
    """Criteria for listing subscriptions; empty values match everything."""

    user_id: str = ""
    service_name: str = ""
    from_date: Optional[date] = None
    to_date: Optional[date] = None


@dataclass(frozen=True)
class SumFilter(SubscriptionFilter):
    """Criteria for summing subscription prices."""


class SubscriptionRepository(Protocol):
    """What the service needs from subscription storage."""

    def create(self, subscription: Subscription) -> Subscription: ...

    def get_by_id(self, subscription_id: str) -> Optional[Subscription]: ...

    def update(self, subscription: Subscription) -> Subscription: ...

    def delete(self, subscription_id: str) -> None: ...

    def get_all(self, criteria: SubscriptionFilter) -> list[Subscription]: ...

    def get_sum(self, criteria: SumFilter) -> int: ...


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _uuid(value: Any, context: str) -> str:
    try:
        return str(uuid.UUID(value))
    except (ValueError, TypeError, AttributeError) as exc:
        raise RepositoryError(f"{context}: invalid input syntax for type uuid: {value!r}") from exc


def _values(subscription: Subscription) -> dict[str, Any]:
    return {name: getattr(subscription, name) for name in _FIELDS}


def _from_row(row: Any) -> Subscription:
    values = dict(row._mapping)
    values["service_name"] = values["service_name"] or ""
    return Subscription(**values)


def _conditions(criteria: SubscriptionFilter, context: str) -> list:
    conditions = []
    if criteria.user_id:
        conditions.append(subscriptions.c.user_id == _uuid(criteria.user_id, context))
    if criteria.service_name:
        conditions.append(subscriptions.c.service_name == criteria.service_name)
    if criteria.from_date is not None:
        conditions.append(subscriptions.c.start_date >= criteria.from_date)
    if criteria.to_date is not None:
        conditions.append(subscriptions.c.start_date <= criteria.to_date)
    return conditions


class SqlSubscriptionRepository:
    """Subscription storage backed by a SQLAlchemy engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _write(self, statement: Any, prefix: str = "") -> Any:
        try:
            with self._engine.begin() as conn:
                return conn.execute(statement)
        except SQLAlchemyError as exc:
            raise RepositoryError(f"{prefix}{exc}") from exc

    def _read(self, statement: Any, prefix: str) -> list:
        try:
            with self._engine.connect() as conn:
                return list(conn.execute(statement))
        except SQLAlchemyError as exc:
            raise RepositoryError(f"{prefix}: {exc}") from exc

    def create(self, subscription: Subscription) -> Subscription:
        """Insert a subscription, filling in its id and timestamps."""
        context = "failed to insert subscription"
        subscription.id = _uuid(subscription.id, context) if subscription.id else str(uuid.uuid4())
        subscription.user_id = _uuid(subscription.user_id, context)
        now = _now()
        subscription.created_at = subscription.created_at or now
        subscription.updated_at = subscription.updated_at or now
        self._write(insert(subscriptions).values(**_values(subscription)))
        return subscription

    def get_by_id(self, subscription_id: str) -> Optional[Subscription]:
        """Return the subscription with this id, or None if there is none."""
        key = _uuid(subscription_id, "failed to get subscription")
        rows = self._read(select(subscriptions).where(subscriptions.c.id == key).limit(1),
                          "failed to get subscription")
        return _from_row(rows[0]) if rows else None

    def update(self, subscription: Subscription) -> Subscription:
        """Save every field; a subscription that is not stored yet is inserted."""
        if not subscription.id:
            return self.create(subscription)
        context = "failed to update subscription"
        subscription.id = _uuid(subscription.id, context)
        subscription.user_id = _uuid(subscription.user_id, context)
        subscription.updated_at = _now()
        result = self._write(
            update(subscriptions).where(subscriptions.c.id == subscription.id).values(**_values(subscription))
        )
        if result.rowcount == 0:
            subscription.created_at = subscription.created_at or subscription.updated_at
            self._write(insert(subscriptions).values(**_values(subscription)))
        return subscription

    def delete(self, subscription_id: str) -> None:
        """Remove the subscription with this id; a missing one is not an error."""
        key = _uuid(subscription_id, "failed to delete subscription")
        self._write(delete(subscriptions).where(subscriptions.c.id == key))

    def get_all(self, criteria: Optional[SubscriptionFilter] = None) -> list[Subscription]:
        """Return the subscriptions matching the criteria."""
        context = "failed to get subscriptions"
        query = select(subscriptions).where(*_conditions(criteria or SubscriptionFilter(), context))
        return [_from_row(row) for row in self._read(query, context)]

    def get_sum(self, criteria: Optional[SumFilter] = None) -> int:
        """Return the total price of the matching subscriptions, 0 if none match."""
        context = "failed to get sum"
        query = select(func.coalesce(func.sum(subscriptions.c.price), 0)).where(
            *_conditions(criteria or SumFilter(), context)
        )
        return int(self._read(query, context)[0][0])


def open_database(config: Config, logger: logging.Logger) -> Engine:
    """Connect to the configured database and create the subscriptions table."""
    url = config.db_url
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    logger.info("Connecting to database", extra={"fields": {"dsn": config.db_url}})
    try:
        engine = create_engine(url)
        engine.connect().close()
    except (SQLAlchemyError, ImportError, ValueError) as exc:
        raise RepositoryError(f"failed to connect to database: {exc}") from exc
    try:
        metadata.create_all(engine)
    except SQLAlchemyError as exc:
        logger.error("Failed to migrate database", extra={"fields": {"error": str(exc)}})
        engine.dispose()
        raise RepositoryError(f"failed to automigrate database: {exc}") from exc
    logger.info("Database migration complete")
    return engine