# Path: certverify/loaders/__init__.py
"""
Certificate Verification Loaders (INPUT layer)

Collaborator interfaces and their in-memory / HTTP implementations.
SQL-backed repositories live in certverify.database.
"""

from .interfaces import RecordRepository, InstitutionRepository, LedgerClient
from .memory_repository import (
    InMemoryRecordRepository,
    InMemoryInstitutionRepository,
    load_dataset,
)
from .ledger_client import InMemoryLedger, HttpLedgerClient

__all__ = [
    'RecordRepository',
    'InstitutionRepository',
    'LedgerClient',
    'InMemoryRecordRepository',
    'InMemoryInstitutionRepository',
    'load_dataset',
    'InMemoryLedger',
    'HttpLedgerClient',
]
