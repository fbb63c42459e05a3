# =============================================================================
# tests/test_store.py - Store Adapter Tests
# =============================================================================
# Runs against throwaway SQLite files so no database server is needed.
# =============================================================================

import sqlite3

import pytest

from lib.cache import TTLCache
from lib.errors import StoreConnectionError
from lib.store import SessionConfigStore, SQLAlchemyStoreAdapter, connection_identity


@pytest.fixture
def sales_db(tmp_path):
    """SQLite file with an orders table of 7 rows and an empty customers table."""
    path = tmp_path / "sales.db"
    conn = sqlite3.connect(path)
    conn.executescript(
        """
        CREATE TABLE orders (
            id INTEGER PRIMARY KEY,
            status VARCHAR(20) NOT NULL,
            amount NUMERIC
        );
        CREATE TABLE customers (id INTEGER PRIMARY KEY, name TEXT);
        """
    )
    conn.executemany(
        "INSERT INTO orders (status, amount) VALUES (?, ?)",
        [("shipped", 10), ("shipped", 20), ("pending", 5), ("pending", 7),
         ("shipped", 1), ("cancelled", 3), ("shipped", 4)],
    )
    conn.commit()
    conn.close()
    return f"sqlite:///{path}"


@pytest.fixture
def store(sales_db):
    return SQLAlchemyStoreAdapter(sales_db, cache=TTLCache(ttl_seconds=60))


class TestConnectionIdentity:
    """Test connection_identity()."""

    def test_password_removed(self):
        identity = connection_identity("postgresql://app:secret@db:5432/sales")
        assert identity == "postgresql://app@db:5432/sales"
        assert "secret" not in identity

    def test_unparseable_url(self):
        with pytest.raises(StoreConnectionError):
            connection_identity("not a url")


class TestSQLAlchemyStoreAdapter:
    """Test the adapter against SQLite."""

    def test_connection_ok(self, store):
        store.test_connection()

    def test_connection_failure(self, tmp_path):
        adapter = SQLAlchemyStoreAdapter(f"sqlite:///{tmp_path}/missing/dir/x.db")
        with pytest.raises(StoreConnectionError) as exc_info:
            adapter.test_connection()
        assert exc_info.value.code == "STORE_CONNECTION_FAILED"

    def test_fetch_catalog(self, store):
        catalog = store.fetch_catalog()

        assert catalog.table_names() == ["customers", "orders"]
        orders = catalog.get_table("ORDERS")
        assert orders.row_count == 7
        assert orders.column_names() == ["id", "status", "amount"]
        status = next(c for c in orders.columns if c.name == "status")
        assert status.nullable is False
        assert status.type.startswith("VARCHAR")
        assert catalog.get_table("customers").row_count == 0

    def test_catalog_is_cached(self, store, sales_db):
        first = store.fetch_catalog()

        # A second adapter sharing the cache sees the same snapshot
        other = SQLAlchemyStoreAdapter(sales_db, cache=store.cache)
        assert other.fetch_catalog() is first

    def test_run_statement(self, store):
        rows = store.run_statement(
            "SELECT status, COUNT(*) AS n FROM orders GROUP BY status ORDER BY n DESC"
        )
        assert rows[0] == {"status": "shipped", "n": 4}
        assert len(rows) == 3

    def test_colon_words_in_literals_are_not_parameters(self, store):
        rows = store.run_statement("SELECT 'ratio :x' AS label, 'at 10:30' AS t")
        assert rows == [{"label": "ratio :x", "t": "at 10:30"}]

    def test_run_statement_error_propagates(self, store):
        with pytest.raises(Exception) as exc_info:
            store.run_statement("SELECT nme FROM customers")
        assert "nme" in str(exc_info.value)


class TestSessionConfigStore:
    """Test per-session database configs."""

    def test_configure_and_lookup(self, sales_db):
        configs = SessionConfigStore(ttl_seconds=60)

        adapter = configs.configure("s1", sales_db)

        assert adapter.identity == sales_db
        assert configs.has("s1")
        assert configs.get_adapter("s1").url == sales_db
        assert configs.get_adapter("other") is None
        assert len(configs) == 1

    def test_failed_connection_not_stored(self, tmp_path):
        configs = SessionConfigStore(ttl_seconds=60)

        with pytest.raises(StoreConnectionError):
            configs.configure("s1", f"sqlite:///{tmp_path}/missing/dir/x.db")
        assert not configs.has("s1")

    def test_remove(self, sales_db):
        configs = SessionConfigStore(ttl_seconds=60)
        configs.configure("s1", sales_db)

        configs.remove("s1")
        assert configs.get_adapter("s1") is None
