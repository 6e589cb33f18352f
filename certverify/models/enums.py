# Path: certverify/models/enums.py
"""
Enumeration Constants for Certificate Verification

Type-safe enumerations for statuses, severities and anomaly types.
Using enums instead of string literals prevents typos and lets
exhaustive mappings (risk scores, deductions) be checked in tests.

Categories:
1. CertificateStatus - Lifecycle of a stored certificate
2. Severity - Anomaly finding severity
3. AnomalyType - Every rule/statistic the anomaly detector can raise
4. BlacklistType - What a blacklist entry identifies
5. VerificationState - Orchestrator state machine
6. MatchMethod - How the record matcher located a stored record
"""

from enum import Enum


# ==============================================================================
# CERTIFICATE STATUS
# ==============================================================================

class CertificateStatus(Enum):
    """
    Lifecycle status of a stored certificate.

    Only VERIFIED records contribute to institutional aggregate statistics.
    """
    PENDING = 'PENDING'
    VERIFIED = 'VERIFIED'
    REJECTED = 'REJECTED'
    FLAGGED = 'FLAGGED'


# ==============================================================================
# SEVERITY
# ==============================================================================

class Severity(Enum):
    """Severity of an anomaly finding, lowest to highest."""
    LOW = 'LOW'
    MEDIUM = 'MEDIUM'
    HIGH = 'HIGH'
    CRITICAL = 'CRITICAL'


# ==============================================================================
# ANOMALY TYPE
# ==============================================================================

class AnomalyType(Enum):
    """
    Anomaly finding types.

    Grade rules:
        IMPOSSIBLE_GRADE, GRADE_INCONSISTENCY, SUSPICIOUS_GRADE_PATTERN
    Pattern rules:
        SEQUENTIAL_CERTIFICATE_NUMBER, SUSPICIOUS_NAME, INVALID_CHARACTERS,
        MISSING_CRITICAL_FIELDS
    Temporal rules:
        FUTURE_PASSING_YEAR, FUTURE_ISSUE_DATE, COMPLETION_AFTER_ISSUE,
        IMPLAUSIBLE_PASSING_YEAR
    Document rules:
        FORGERY_INDICATOR, LOW_OCR_CONFIDENCE
    Statistical rules:
        STATISTICAL_OUTLIER_CGPA, STATISTICAL_OUTLIER_PERCENTAGE
    Cross-reference rules:
        DUPLICATE_CERTIFICATE, BLACKLISTED_ENTITY
    """
    IMPOSSIBLE_GRADE = 'IMPOSSIBLE_GRADE'
    GRADE_INCONSISTENCY = 'GRADE_INCONSISTENCY'
    SUSPICIOUS_GRADE_PATTERN = 'SUSPICIOUS_GRADE_PATTERN'
    SEQUENTIAL_CERTIFICATE_NUMBER = 'SEQUENTIAL_CERTIFICATE_NUMBER'
    SUSPICIOUS_NAME = 'SUSPICIOUS_NAME'
    INVALID_CHARACTERS = 'INVALID_CHARACTERS'
    MISSING_CRITICAL_FIELDS = 'MISSING_CRITICAL_FIELDS'
    FUTURE_PASSING_YEAR = 'FUTURE_PASSING_YEAR'
    FUTURE_ISSUE_DATE = 'FUTURE_ISSUE_DATE'
    COMPLETION_AFTER_ISSUE = 'COMPLETION_AFTER_ISSUE'
    IMPLAUSIBLE_PASSING_YEAR = 'IMPLAUSIBLE_PASSING_YEAR'
    FORGERY_INDICATOR = 'FORGERY_INDICATOR'
    LOW_OCR_CONFIDENCE = 'LOW_OCR_CONFIDENCE'
    STATISTICAL_OUTLIER_CGPA = 'STATISTICAL_OUTLIER_CGPA'
    STATISTICAL_OUTLIER_PERCENTAGE = 'STATISTICAL_OUTLIER_PERCENTAGE'
    DUPLICATE_CERTIFICATE = 'DUPLICATE_CERTIFICATE'
    BLACKLISTED_ENTITY = 'BLACKLISTED_ENTITY'


# ==============================================================================
# BLACKLIST TYPE
# ==============================================================================

class BlacklistType(Enum):
    """What a blacklist entry's identifier refers to."""
    CERTIFICATE = 'CERTIFICATE'
    STUDENT = 'STUDENT'


# ==============================================================================
# VERIFICATION STATE
# ==============================================================================

class VerificationState(Enum):
    """
    Orchestrator states.

    RECEIVED -> CHECKING -> COMPLETED | FAILED
    """
    RECEIVED = 'RECEIVED'
    CHECKING = 'CHECKING'
    COMPLETED = 'COMPLETED'
    FAILED = 'FAILED'


# ==============================================================================
# MATCH METHOD
# ==============================================================================

class MatchMethod(Enum):
    """How the record matcher found the stored record."""
    CERTIFICATE_NUMBER = 'certificate_number'
    NAME_ROLL_INSTITUTION = 'name_roll_institution'


__all__ = [
    'CertificateStatus',
    'Severity',
    'AnomalyType',
    'BlacklistType',
    'VerificationState',
    'MatchMethod',
]
