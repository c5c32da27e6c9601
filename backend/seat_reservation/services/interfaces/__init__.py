"""
Service interfaces for dependency inversion.
Allows swapping store implementations without changing business logic.
"""

from .catalog import EventCatalog
from .ledger import LedgerStore

__all__ = ['EventCatalog', 'LedgerStore']
