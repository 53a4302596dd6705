"""Balance and debt-settlement engine for shared group expenses."""

from splitledger.cache import BalanceCache
from splitledger.db.repo import InMemoryLedgerRepository, Ledger, LedgerSource
from splitledger.engine import BalanceEngine

__all__ = [
    "BalanceCache",
    "BalanceEngine",
    "InMemoryLedgerRepository",
    "Ledger",
    "LedgerSource",
]
