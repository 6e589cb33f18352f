# Path: certverify/engine/__init__.py
"""
Verification Engine (PROCESS layer)

- constants: weights, thresholds, anomaly rule constants
- settings: EngineSettings (tunable values)
- tools: similarity, digest, rounding, stored-record lookup
- checks: the five independent checks
- scoring: overall confidence and risk level
- processors: VerificationOrchestrator
"""

from .settings import EngineSettings
from .tools import similarity, compute_digest
from .checks import (
    RecordMatcher,
    LedgerCheck,
    AnomalyDetector,
    InstitutionCheck,
    DuplicateCheck,
)
from .scoring import ScoreCalculator
from .processors import VerificationOrchestrator, VerificationContext, verify_certificate

__all__ = [
    'EngineSettings',
    'similarity',
    'compute_digest',
    'RecordMatcher',
    'LedgerCheck',
    'AnomalyDetector',
    'InstitutionCheck',
    'DuplicateCheck',
    'ScoreCalculator',
    'VerificationOrchestrator',
    'VerificationContext',
    'verify_certificate',
]
