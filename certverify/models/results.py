# Path: certverify/models/results.py
"""
Verification Result Data Structures

CheckResult is produced by each of the five independent checks.
Its `details` is one of a closed set of typed payloads (one per check,
plus ErrorDetails for a check that could not run), instead of an
open-ended dict.

AnomalyFinding is produced by the anomaly detector; VerificationResult
is the orchestrator's output. All of them are immutable.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from .enums import AnomalyType, Severity, VerificationState, MatchMethod


# ==============================================================================
# CHECK DETAILS (tagged union)
# ==============================================================================

@dataclass(frozen=True)
class RecordMatchDetails:
    """
    Attributes:
        record_id: Id of the stored record compared against
        matched_by: Lookup path that found the record
        field_scores: Per-field score 0-1 for fields present on both sides
        score: Weighted match score 0-100
    """
    record_id: str
    matched_by: MatchMethod
    field_scores: dict = field(default_factory=dict)
    score: int = 0

    kind = 'record_match'


@dataclass(frozen=True)
class LedgerDetails:
    """
    Attributes:
        digest: Digest that was (or would be) looked up on the ledger
        computed: True when the digest was computed locally (legacy path)
        is_legacy: Legacy flag of the certificate checked
        ledger_exists: Ledger answer (None when the ledger was not consulted)
        payload: Ledger payload for the digest
        mismatched_fields: Fields where the ledger payload disagrees with the record
    """
    digest: Optional[str] = None
    computed: bool = False
    is_legacy: bool = False
    ledger_exists: Optional[bool] = None
    payload: dict = field(default_factory=dict)
    mismatched_fields: tuple = ()

    kind = 'ledger'


@dataclass(frozen=True)
class AnomalyDetails:
    """
    Attributes:
        findings: Findings ordered by priority (highest risk first)
        total_deduction: Confidence points deducted
    """
    findings: tuple = ()
    total_deduction: int = 0

    kind = 'anomaly_detection'


@dataclass(frozen=True)
class InstitutionDetails:
    institution_id: Optional[str] = None
    name: Optional[str] = None
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None

    kind = 'institution'


@dataclass(frozen=True)
class DuplicateDetails:
    """
    Attributes:
        duplicate_ids: Ids of the other records sharing identity fields
        excluded_id: Record id excluded from the search (the certificate itself)
    """
    duplicate_ids: tuple = ()
    excluded_id: Optional[str] = None

    kind = 'duplicate'

    @property
    def count(self) -> int:
        return len(self.duplicate_ids)


@dataclass(frozen=True)
class ErrorDetails:
    """
    A check that could not complete.

    Attributes:
        error_type: Exception class name (e.g. 'CollaboratorUnavailable')
        error: Error message
        collaborator: Failing collaborator, when known
    """
    error_type: str
    error: str
    collaborator: Optional[str] = None

    kind = 'error'


CheckDetails = Union[
    RecordMatchDetails,
    LedgerDetails,
    AnomalyDetails,
    InstitutionDetails,
    DuplicateDetails,
    ErrorDetails,
]


# ==============================================================================
# CHECK RESULT
# ==============================================================================

@dataclass(frozen=True)
class CheckResult:
    """
    Result of a single verification check.

    Attributes:
        check_name: Name of the check (see certverify.constants.CHECK_NAMES)
        passed: Whether the check passed
        confidence: Confidence 0-100
        message: Human-readable description of the result
        details: Check-specific payload
    """
    check_name: str
    passed: bool
    confidence: int
    message: str = ''
    details: Optional[CheckDetails] = None

    def __post_init__(self):
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence {self.confidence} outside [0, 100]")

    @property
    def is_error(self) -> bool:
        """True when the check failed because it could not run."""
        return isinstance(self.details, ErrorDetails)


# ==============================================================================
# ANOMALY FINDING
# ==============================================================================

@dataclass(frozen=True)
class AnomalyFinding:
    """
    A single rule or statistic violation.

    Attributes:
        anomaly_type: Finding type
        severity: Finding severity
        confidence: Detector confidence in the finding, 0-100
        description: Human-readable explanation
        risk_score: Risk 0-100, used for ordering
        priority: Rank after prioritization (1 = highest risk), None before
        detection_method: 'RULE' or 'STATISTICAL'
    """
    anomaly_type: AnomalyType
    severity: Severity
    confidence: int
    description: str
    risk_score: int
    priority: Optional[int] = None
    detection_method: str = 'RULE'

    def to_dict(self) -> dict:
        return {
            'type': self.anomaly_type.value,
            'severity': self.severity.value,
            'confidence': self.confidence,
            'description': self.description,
            'risk_score': self.risk_score,
            'priority': self.priority,
            'detection_method': self.detection_method,
        }


# ==============================================================================
# VERIFICATION RESULT
# ==============================================================================

@dataclass(frozen=True)
class VerificationResult:
    """
    Outcome of one verification call.

    Attributes:
        state: COMPLETED, or FAILED when input was rejected, the call was
            cancelled/timed out, or no check could reach its collaborator
        is_valid: overall_confidence >= validity threshold (always False when FAILED)
        overall_confidence: Weighted combination of check confidences, 0-100
        checks: Check name -> CheckResult
        anomalies: Findings, highest risk first
        flagged_reasons: 'check_name: message' for each failed check
        risk_score: Mean risk score of the findings (0 when none)
        risk_level: HIGH / MEDIUM / LOW / MINIMAL
        verified_at: When the result was assembled
    """
    state: VerificationState
    is_valid: bool
    overall_confidence: int
    checks: dict = field(default_factory=dict)
    anomalies: tuple = ()
    flagged_reasons: tuple = ()
    risk_score: int = 0
    risk_level: str = 'MINIMAL'
    verified_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.state is VerificationState.COMPLETED

    @property
    def notes(self) -> str:
        """One line per check: 'name: message (Confidence: N%)'."""
        return '\n'.join(
            f"{name}: {check.message} (Confidence: {check.confidence}%)"
            for name, check in self.checks.items()
        )

    def findings_with_severity(self, *severities: Severity) -> list[AnomalyFinding]:
        return [a for a in self.anomalies if a.severity in severities]


__all__ = [
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
