"""Persistence for account profiles and artifact history."""

from .gateway import InMemoryGateway, JsonFileGateway, PersistenceGateway
from .history import HistoryStore
from .ledger import CreditLedger, DeductionResult, can_afford, try_deduct

__all__ = [
    "CreditLedger",
    "DeductionResult",
    "HistoryStore",
    "InMemoryGateway",
    "JsonFileGateway",
    "PersistenceGateway",
    "can_afford",
    "try_deduct",
]
