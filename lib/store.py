# =============================================================================
# lib/store.py - Persistent Store Adapter
# =============================================================================
# Read access to a relational database for the execution gate and the
# catalog snapshot.
#
# Connections are ephemeral: every call creates an engine without a pool,
# does its work, and disposes the engine. Nothing is held open between
# queries.
#
# Two process-wide TTL caches live here:
# - catalog cache: CatalogSnapshot per connection identity (fixed expiry)
# - session configs: database URL per API session (sliding expiry)
#
# Usage:
#   from lib.store import SQLAlchemyStoreAdapter
#   store = SQLAlchemyStoreAdapter("sqlite:///sales.db")
#   catalog = store.fetch_catalog()
#   rows = store.run_statement("SELECT COUNT(*) AS n FROM orders")
# =============================================================================

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Protocol

from sqlalchemy import create_engine, func, inspect, select, table, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.pool import NullPool

from app.config import settings
from core.models.catalog import CatalogSnapshot, ColumnSchema, TableSchema
from lib.cache import TTLCache
from lib.errors import StoreConnectionError

logger = logging.getLogger(__name__)


# =============================================================================
# Store Contract
# =============================================================================

class StoreAdapter(Protocol):
    """What the agents need from a database."""

    def fetch_catalog(self) -> CatalogSnapshot:
        ...

    def run_statement(self, statement: str) -> list[dict[str, Any]]:
        ...


# Shared across adapters so repeated queries against the same database
# don't re-inspect it
catalog_cache = TTLCache(ttl_seconds=settings.SCHEMA_CACHE_TTL_SECONDS)


def connection_identity(url: str) -> str:
    """
    Password-free rendering of a connection URL.

    Used as the catalog cache key and in log lines.

    Example:
        connection_identity("postgresql://app:secret@db:5432/sales")
        # "postgresql://app@db:5432/sales"

    Raises:
        StoreConnectionError: If the URL can't be parsed
    """
    try:
        parsed = make_url(url).set(password=None)
    except ArgumentError as e:
        raise StoreConnectionError("<unparseable URL>", str(e))
    return parsed.render_as_string(hide_password=False)


# =============================================================================
# SQLAlchemy Adapter
# =============================================================================

class SQLAlchemyStoreAdapter:
    """
    StoreAdapter over any SQLAlchemy-supported database.

    Attributes:
        url: Full connection URL (may contain a password)
        identity: Password-free URL used for caching and logging
    """

    def __init__(self, url: str, cache: TTLCache | None = None):
        self.url = url
        self.identity = connection_identity(url)
        self.cache = cache if cache is not None else catalog_cache

    @contextmanager
    def _engine(self) -> Iterator[Engine]:
        engine = create_engine(self.url, poolclass=NullPool)
        logger.debug(f"Opened engine for {self.identity}")
        try:
            yield engine
        finally:
            engine.dispose()
            logger.debug(f"Disposed engine for {self.identity}")

    # -------------------------------------------------------------------------
    # Connectivity
    # -------------------------------------------------------------------------

    def test_connection(self) -> None:
        """
        Run a trivial query.

        Raises:
            StoreConnectionError: If the database can't be reached
        """
        try:
            with self._engine() as engine, engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, ImportError) as e:
            raise StoreConnectionError(self.identity, str(e).split("\n")[0])

        logger.info(f"Connection test passed for {self.identity}")

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------

    def fetch_catalog(self) -> CatalogSnapshot:
        """
        Describe every table: columns, types, nullability and row count.

        Served from the catalog cache when a fresh snapshot exists for this
        connection identity.
        """
        cached = self.cache.get(self.identity)
        if cached is not None:
            logger.info(f"Catalog cache hit for {self.identity}")
            return cached

        tables: list[TableSchema] = []
        with self._engine() as engine, engine.connect() as conn:
            inspector = inspect(conn)
            for name in sorted(inspector.get_table_names()):
                columns = [
                    ColumnSchema(
                        name=col["name"],
                        type=str(col["type"]),
                        nullable=bool(col.get("nullable", True)),
                    )
                    for col in inspector.get_columns(name)
                ]
                row_count = conn.execute(
                    select(func.count()).select_from(table(name))
                ).scalar_one()
                tables.append(TableSchema(name=name, columns=columns, row_count=row_count))

        snapshot = CatalogSnapshot(tables=tables, last_updated=datetime.utcnow())
        self.cache.set(self.identity, snapshot)
        logger.info(f"Cached catalog for {self.identity} ({len(tables)} tables)")
        return snapshot

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def run_statement(self, statement: str) -> list[dict[str, Any]]:
        """Execute one statement and return its rows as dicts."""
        with self._engine() as engine, engine.connect() as conn:
            # Driver-level execution so ":name" inside literals is not a bind parameter
            result = conn.exec_driver_sql(statement)
            if not result.returns_rows:
                return []
            rows = [dict(row._mapping) for row in result]

        logger.debug(f"Statement returned {len(rows)} rows from {self.identity}")
        return rows


# =============================================================================
# Session Config Store
# =============================================================================

class SessionConfigStore:
    """
    Database URL per API session.

    Entries expire after SESSION_TIMEOUT_SECONDS without being read; every
    successful lookup restarts the clock.
    """

    def __init__(self, ttl_seconds: float | None = None):
        self._configs = TTLCache(
            ttl_seconds=ttl_seconds or settings.SESSION_TIMEOUT_SECONDS,
            sliding=True,
        )

    def configure(self, session_id: str, url: str) -> SQLAlchemyStoreAdapter:
        """
        Test the connection and remember it for the session.

        Raises:
            StoreConnectionError: If the connection test fails (nothing is stored)
        """
        adapter = SQLAlchemyStoreAdapter(url)
        adapter.test_connection()
        self._configs.set(session_id, url)
        logger.info(f"Stored database config for session {session_id} ({adapter.identity})")
        return adapter

    def get_adapter(self, session_id: str) -> SQLAlchemyStoreAdapter | None:
        url = self._configs.get(session_id)
        if url is None:
            return None
        return SQLAlchemyStoreAdapter(url)

    def has(self, session_id: str) -> bool:
        return session_id in self._configs

    def remove(self, session_id: str) -> None:
        self._configs.delete(session_id)
        logger.info(f"Removed database config for session {session_id}")

    def __len__(self) -> int:
        return len(self._configs)

    def cleanup(self) -> list[str]:
        """Forget every session whose config has expired."""
        expired = self._configs.purge_expired()
        for session_id in expired:
            logger.info(f"Cleaned up expired session: {session_id}")
        return expired


session_configs = SessionConfigStore()
