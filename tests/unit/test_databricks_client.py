"""Unit tests for DatabricksSqlClient retry and connection handling."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from bundle_offers.adapters.databricks import client as client_module
from bundle_offers.adapters.databricks.client import DatabricksSqlClient
from bundle_offers.domain.common.errors import StoreUnavailable
from bundle_offers.settings import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        databricks_server_hostname="adb-123.azuredatabricks.net",
        databricks_http_path="/sql/1.0/warehouses/abc",
        databricks_access_token="token",
    )


def make_connection(rows=None, description=None) -> MagicMock:
    connection = MagicMock()
    cursor = connection.cursor.return_value
    cursor.description = description or [("id",), ("name",)]
    cursor.fetchall.return_value = rows or []
    return connection


def test_missing_credentials_raise_value_error_listing_names() -> None:
    client = DatabricksSqlClient(Settings(databricks_server_hostname="host"))
    with pytest.raises(ValueError) as exc:
        client.query("SELECT 1")
    assert "DATABRICKS_HTTP_PATH" in str(exc.value)
    assert "DATABRICKS_ACCESS_TOKEN" in str(exc.value)


def test_query_returns_rows_as_dicts(settings: Settings) -> None:
    client = DatabricksSqlClient(settings)
    client._connection = make_connection(rows=[("g-1", "Bundle")])

    rows = client.query("SELECT id, name FROM t WHERE shop_domain = ?", ["shop"])

    assert rows == [{"id": "g-1", "name": "Bundle"}]
    cursor = client._connection.cursor.return_value
    cursor.execute.assert_called_once_with("SELECT id, name FROM t WHERE shop_domain = ?", parameters=["shop"])
    cursor.close.assert_called_once()


def test_execute_commits(settings: Settings) -> None:
    client = DatabricksSqlClient(settings)
    connection = make_connection()
    client._connection = connection

    client.execute("DELETE FROM t WHERE id = ?", ["g-1"])

    connection.commit.assert_called_once()


def test_transient_failure_is_retried_with_backoff(settings: Settings, monkeypatch) -> None:
    delays: list[float] = []
    client = DatabricksSqlClient(settings, max_retries=3, initial_delay=0.5, sleep=delays.append)
    broken = make_connection()
    broken.cursor.return_value.execute.side_effect = RuntimeError("connection reset")
    healthy = make_connection(rows=[("g-1", "Bundle")])
    connections = iter([broken, healthy])
    monkeypatch.setattr(client_module.databricks_sql, "connect", lambda **kwargs: next(connections))

    rows = client.query("SELECT id, name FROM t")

    assert rows == [{"id": "g-1", "name": "Bundle"}]
    assert delays == [0.5]


def test_exhausted_retries_raise_store_unavailable(settings: Settings) -> None:
    delays: list[float] = []
    client = DatabricksSqlClient(settings, max_retries=3, initial_delay=0.5, sleep=delays.append)
    connection = make_connection()
    connection.cursor.return_value.execute.side_effect = RuntimeError("warehouse stopped")
    client._connect = lambda: connection

    with pytest.raises(StoreUnavailable):
        client.execute("DELETE FROM t")
    assert delays == [0.5, 1.0]


def test_close_releases_connection(settings: Settings) -> None:
    client = DatabricksSqlClient(settings)
    connection = make_connection()
    client._connection = connection

    with client:
        pass

    connection.close.assert_called_once()
    assert client._connection is None
