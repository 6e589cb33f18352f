# Path: certverify/__init__.py
"""
Certificate Verification

Authenticates academic certificates submitted by third parties against
institutional records. Five independent checks (record match, ledger
digest, anomaly detection, institution status, duplicates) are combined
into one weighted confidence score.

Layers:
- loaders / database (INPUT): record, institution and ledger collaborators
- engine (PROCESS): checks, scoring, orchestrator
- output (OUTPUT): JSON reports

Usage:
    from certverify import (
        CandidateSubmission,
        VerificationOrchestrator,
        load_dataset,
    )

    records, institutions = load_dataset(Path('records.json'))
    orchestrator = VerificationOrchestrator(records, institutions, ledger)
    result = await orchestrator.verify(CandidateSubmission.from_dict(fields))
"""

__version__ = '1.0.0'

from .exceptions import (
    CertVerifyError,
    InputError,
    CollaboratorUnavailable,
    InconsistentData,
    ConfigurationError,
)
from .models import (
    CertificateRecord,
    CandidateSubmission,
    Institution,
    BlacklistEntry,
    CheckResult,
    AnomalyFinding,
    VerificationResult,
    VerificationState,
    AnomalyType,
    Severity,
)
from .loaders import (
    InMemoryRecordRepository,
    InMemoryInstitutionRepository,
    InMemoryLedger,
    HttpLedgerClient,
    load_dataset,
)
from .engine import (
    EngineSettings,
    VerificationOrchestrator,
    VerificationContext,
    verify_certificate,
    similarity,
    compute_digest,
)
from .output import ReportGenerator

__all__ = [
    '__version__',
    'CertVerifyError',
    'InputError',
    'CollaboratorUnavailable',
    'InconsistentData',
    'ConfigurationError',
    'CertificateRecord',
    'CandidateSubmission',
    'Institution',
    'BlacklistEntry',
    'CheckResult',
    'AnomalyFinding',
    'VerificationResult',
    'VerificationState',
    'AnomalyType',
    'Severity',
    'InMemoryRecordRepository',
    'InMemoryInstitutionRepository',
    'InMemoryLedger',
    'HttpLedgerClient',
    'load_dataset',
    'EngineSettings',
    'VerificationOrchestrator',
    'VerificationContext',
    'verify_certificate',
    'similarity',
    'compute_digest',
    'ReportGenerator',
]
