"""Database client factory.

Turns configured datasources into connected ``AsyncMySQLAdapter``
instances.  Connections are verified with ``SELECT 1`` before use.
"""

import logging

from db_sync.adapters.mysql import AsyncMySQLAdapter
from db_sync.config.models import AppConfig, DataSourceConfig

logger = logging.getLogger(__name__)


class DataSourceNotFoundError(KeyError):
    """Raised when a datasource alias is not configured."""

    pass


def get_datasource(config: AppConfig, alias: str) -> DataSourceConfig:
    """Look up a datasource by alias.

    Raises:
        DataSourceNotFoundError: If *alias* is not configured.
    """
    if alias not in config.datasources:
        available = ", ".join(config.datasources.keys())
        raise DataSourceNotFoundError(
            f"Datasource '{alias}' not found. Available: {available}"
        )
    return config.datasources[alias]


def create_adapter(datasource: DataSourceConfig) -> AsyncMySQLAdapter:
    """Create an adapter for a datasource without connecting."""
    return AsyncMySQLAdapter(datasource.database_url())


async def connect_datasource(datasource: DataSourceConfig) -> AsyncMySQLAdapter:
    """Create an adapter and verify the connection.

    The adapter is closed again if the connection test fails.

    Returns:
        A connected ``AsyncMySQLAdapter``.

    Raises:
        ConnectionError: If the database cannot be reached.
    """
    logger.info(f"Connecting to {datasource.display_name()}")
    adapter = create_adapter(datasource)
    try:
        await adapter.test_connection()
    except Exception as e:
        await adapter.close()
        raise ConnectionError(
            f"failed to connect to {datasource.display_name()}: {e}"
        ) from e
    logger.info(f"Connected to {datasource.display_name()}")
    return adapter
