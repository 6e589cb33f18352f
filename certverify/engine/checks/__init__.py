# Path: certverify/engine/checks/__init__.py
"""
Verification Checks

The five independent checks run by the orchestrator. Each exposes
`async check(candidate) -> CheckResult`.
"""

from .record_matcher import RecordMatcher, RecordMatch
from .ledger_check import LedgerCheck
from .anomaly_detector import AnomalyDetector, prioritize
from .institution_check import InstitutionCheck
from .duplicate_check import DuplicateCheck

__all__ = [
    'RecordMatcher',
    'RecordMatch',
    'LedgerCheck',
    'AnomalyDetector',
    'prioritize',
    'InstitutionCheck',
    'DuplicateCheck',
]
