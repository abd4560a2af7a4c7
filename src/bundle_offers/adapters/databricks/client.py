from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, TypeVar

from databricks import sql as databricks_sql

from bundle_offers.domain.common.errors import StoreUnavailable
from bundle_offers.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

Params = Optional[list[Any] | dict[str, Any]]


class DatabricksSqlClient:
    """Thin wrapper over the Databricks SQL Connector used as the offer record store."""

    def __init__(
        self,
        settings: Settings,
        max_retries: int = 3,
        initial_delay: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self._sleep = sleep
        self._connection: Optional[Any] = None

    def _connect(self) -> Any:
        if self._connection is None:
            missing = [
                name
                for name, value in (
                    ("DATABRICKS_SERVER_HOSTNAME", self.settings.databricks_server_hostname),
                    ("DATABRICKS_HTTP_PATH", self.settings.databricks_http_path),
                    ("DATABRICKS_ACCESS_TOKEN", self.settings.databricks_access_token),
                )
                if not value
            ]
            if missing:
                raise ValueError(f"Databricks connection requires {', '.join(missing)}")

            logger.info(f"Connecting to Databricks server: {self.settings.databricks_server_hostname}")
            connection_params = {
                "server_hostname": self.settings.databricks_server_hostname,
                "http_path": self.settings.databricks_http_path,
                "access_token": self.settings.databricks_access_token,
            }
            if self.settings.databricks_catalog:
                connection_params["catalog"] = self.settings.databricks_catalog
            if self.settings.databricks_schema:
                connection_params["schema"] = self.settings.databricks_schema
            self._connection = databricks_sql.connect(**connection_params)
        return self._connection

    def _with_retry(self, operation: Callable[[], T]) -> T:
        """Run ``operation`` with exponential backoff; exhausted retries become StoreUnavailable."""
        for attempt in range(self.max_retries):
            try:
                return operation()
            except ValueError:
                raise
            except Exception as e:
                # A broken connection is not reused on the next attempt
                self._connection = None
                if attempt < self.max_retries - 1:
                    delay = self.initial_delay * (2**attempt)
                    logger.warning(
                        f"Databricks statement failed (attempt {attempt + 1}/{self.max_retries}), "
                        f"retrying in {delay}s: {e}"
                    )
                    self._sleep(delay)
                else:
                    logger.error(f"Databricks statement failed after {self.max_retries} attempts: {e}")
                    raise StoreUnavailable(f"Record store unavailable: {e}") from e
        raise StoreUnavailable("Record store unavailable: no attempts made")

    def query(self, sql: str, params: Params = None) -> list[dict[str, Any]]:
        """Execute a SELECT and return rows as dictionaries."""
        logger.debug(f"Executing query: {sql[:200]}...")

        def _execute_query() -> list[dict[str, Any]]:
            cursor = self._connect().cursor()
            try:
                if params:
                    cursor.execute(sql, parameters=params)
                else:
                    cursor.execute(sql)
                columns = [desc[0] for desc in cursor.description]
                return [dict(zip(columns, row)) for row in cursor.fetchall()]
            finally:
                cursor.close()

        return self._with_retry(_execute_query)

    def execute(self, sql: str, params: Params = None) -> None:
        """Execute an INSERT, UPDATE or DELETE and commit it."""
        logger.debug(f"Executing statement: {sql[:200]}...")

        def _execute_stmt() -> None:
            conn = self._connect()
            cursor = conn.cursor()
            try:
                if params:
                    cursor.execute(sql, parameters=params)
                else:
                    cursor.execute(sql)
                conn.commit()
            finally:
                cursor.close()

        self._with_retry(_execute_stmt)

    def close(self) -> None:
        if self._connection:
            try:
                self._connection.close()
                logger.info("Closed Databricks connection")
            except Exception as e:
                logger.warning(f"Error closing connection: {e}")
            finally:
                self._connection = None

    def __enter__(self) -> "DatabricksSqlClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
