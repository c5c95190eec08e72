"""Client side of the bridge: request broker and the DatabaseClient facade."""

from folkstore.client.broker import DEFAULT_TIMEOUT_MS, RequestBroker
from folkstore.client.client import DatabaseClient

__all__ = ["DEFAULT_TIMEOUT_MS", "DatabaseClient", "RequestBroker"]
