"""Data connectors for rowpick."""

from rowpick.connectors.db_connector import DBConnector, build_url

__all__ = [
    "DBConnector",
    "build_url",
]
