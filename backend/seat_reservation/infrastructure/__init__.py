"""
Infrastructure layer - external system integrations.
Keeps business logic clean from implementation details.
"""

from .memory import InMemoryEventCatalog, InMemoryLedgerStore
from .redis_client import close_redis, get_redis
from .sql_catalog import SqlEventCatalog
from .sql_ledger import SqlLedgerStore

__all__ = [
    'InMemoryEventCatalog', 'InMemoryLedgerStore',
    'SqlEventCatalog', 'SqlLedgerStore',
    'close_redis', 'get_redis',
]
