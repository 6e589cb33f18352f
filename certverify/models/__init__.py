# Path: certverify/models/__init__.py
"""
Certificate Verification Models

Data structures shared by loaders, engine and output layers.
"""

from .enums import (
    CertificateStatus,
    Severity,
    AnomalyType,
    BlacklistType,
    VerificationState,
    MatchMethod,
)
from .certificate import (
    CertificateRecord,
    CandidateSubmission,
    Institution,
    BlacklistEntry,
    AggregateStats,
    LedgerValidation,
    validate_record,
    parse_date,
)
from .results import (
    RecordMatchDetails,
    LedgerDetails,
    AnomalyDetails,
    InstitutionDetails,
    DuplicateDetails,
    ErrorDetails,
    CheckDetails,
    CheckResult,
    AnomalyFinding,
    VerificationResult,
)

__all__ = [
    'CertificateStatus',
    'Severity',
    'AnomalyType',
    'BlacklistType',
    'VerificationState',
    'MatchMethod',
    'CertificateRecord',
    'CandidateSubmission',
    'Institution',
    'BlacklistEntry',
    'AggregateStats',
    'LedgerValidation',
    'validate_record',
    'parse_date',
    'RecordMatchDetails',
    'LedgerDetails',
    'AnomalyDetails',
    'InstitutionDetails',
    'DuplicateDetails',
    'ErrorDetails',
    'CheckDetails',
    'CheckResult',
    'AnomalyFinding',
    'VerificationResult',
]
