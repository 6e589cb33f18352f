# Path: certverify/engine/constants/anomaly.py
"""
Anomaly Detection Constants

Patterns, limits, risk scores and confidence deductions used by the
anomaly detector rules.

The CGPA -> percentage factor and the deduction magnitudes are
empirical values carried over from the production rule set. They have
no derivation beyond calibration against past forgeries; override them
through EngineSettings rather than editing them here.
"""

import re

from ...models.enums import AnomalyType, Severity


# ==============================================================================
# SEVERITY DEDUCTIONS
# ==============================================================================
# Points deducted from the anomaly check confidence (starts at 100) per finding.

SEVERITY_DEDUCTIONS = {
    Severity.CRITICAL: 30,
    Severity.HIGH: 20,
    Severity.MEDIUM: 15,
    Severity.LOW: 5,
}

# ==============================================================================
# RISK SCORES
# ==============================================================================
# Risk score per (type, severity). Types raised at one severity only have
# one entry.

RISK_SCORES = {
    (AnomalyType.IMPOSSIBLE_GRADE, Severity.CRITICAL): 95,
    (AnomalyType.GRADE_INCONSISTENCY, Severity.HIGH): 75,
    (AnomalyType.GRADE_INCONSISTENCY, Severity.MEDIUM): 60,
    (AnomalyType.SUSPICIOUS_GRADE_PATTERN, Severity.MEDIUM): 60,
    (AnomalyType.SEQUENTIAL_CERTIFICATE_NUMBER, Severity.HIGH): 70,
    (AnomalyType.SEQUENTIAL_CERTIFICATE_NUMBER, Severity.MEDIUM): 55,
    (AnomalyType.SUSPICIOUS_NAME, Severity.HIGH): 85,
    (AnomalyType.INVALID_CHARACTERS, Severity.MEDIUM): 60,
    (AnomalyType.MISSING_CRITICAL_FIELDS, Severity.HIGH): 70,
    (AnomalyType.FUTURE_PASSING_YEAR, Severity.CRITICAL): 100,
    (AnomalyType.FUTURE_ISSUE_DATE, Severity.CRITICAL): 95,
    (AnomalyType.COMPLETION_AFTER_ISSUE, Severity.MEDIUM): 50,
    (AnomalyType.IMPLAUSIBLE_PASSING_YEAR, Severity.MEDIUM): 65,
    (AnomalyType.FORGERY_INDICATOR, Severity.HIGH): 75,
    (AnomalyType.LOW_OCR_CONFIDENCE, Severity.MEDIUM): 55,
    (AnomalyType.STATISTICAL_OUTLIER_CGPA, Severity.MEDIUM): 50,
    (AnomalyType.STATISTICAL_OUTLIER_PERCENTAGE, Severity.MEDIUM): 50,
    (AnomalyType.DUPLICATE_CERTIFICATE, Severity.CRITICAL): 90,
    (AnomalyType.BLACKLISTED_ENTITY, Severity.CRITICAL): 100,
}

# Detector confidence in each finding type (0-100)
FINDING_CONFIDENCE = {
    AnomalyType.IMPOSSIBLE_GRADE: 95,
    AnomalyType.GRADE_INCONSISTENCY: 80,
    AnomalyType.SUSPICIOUS_GRADE_PATTERN: 70,
    AnomalyType.SEQUENTIAL_CERTIFICATE_NUMBER: 85,
    AnomalyType.SUSPICIOUS_NAME: 90,
    AnomalyType.INVALID_CHARACTERS: 75,
    AnomalyType.MISSING_CRITICAL_FIELDS: 90,
    AnomalyType.FUTURE_PASSING_YEAR: 100,
    AnomalyType.FUTURE_ISSUE_DATE: 95,
    AnomalyType.COMPLETION_AFTER_ISSUE: 80,
    AnomalyType.IMPLAUSIBLE_PASSING_YEAR: 85,
    AnomalyType.FORGERY_INDICATOR: 80,
    AnomalyType.LOW_OCR_CONFIDENCE: 70,
    AnomalyType.STATISTICAL_OUTLIER_CGPA: 70,
    AnomalyType.STATISTICAL_OUTLIER_PERCENTAGE: 70,
    AnomalyType.DUPLICATE_CERTIFICATE: 95,
    AnomalyType.BLACKLISTED_ENTITY: 100,
}

# ==============================================================================
# GRADE RULES
# ==============================================================================

# expected_percentage = cgpa * factor (heuristic, tunable)
CGPA_PERCENTAGE_FACTOR = 9.5

# |percentage - expected| above these raises GRADE_INCONSISTENCY
GRADE_INCONSISTENCY_MEDIUM_DEVIATION = 20.0
GRADE_INCONSISTENCY_HIGH_DEVIATION = 25.0

SUSPICIOUS_GRADE_PATTERN = re.compile(r'A\+{2,}|O{3,}|100{2,}', re.IGNORECASE)

# ==============================================================================
# CERTIFICATE NUMBER RULES
# ==============================================================================

# Minimum length of an ascending/descending digit run
SEQUENTIAL_RUN_LENGTH = 3

# Runs at least this long (e.g. 123456) are HIGH instead of MEDIUM
SEQUENTIAL_HIGH_RUN_LENGTH = 6

# All digits identical (e.g. 111111) requires at least this many digits
REPEATED_DIGIT_MIN_LENGTH = 3

# ==============================================================================
# NAME RULES
# ==============================================================================

PLACEHOLDER_NAME_PATTERN = re.compile(
    r'\b(test|sample|dummy|fake|placeholder|john doe|jane doe|asdf|xyz)\b',
    re.IGNORECASE,
)

# Anything that is not a letter, whitespace or name punctuation
INVALID_NAME_CHARACTERS = re.compile(r"[^\w\s.,\-'/()]|[\d_]")

CRITICAL_FIELDS = ('student_name', 'course', 'passing_year')

# ==============================================================================
# DOCUMENT RULES
# ==============================================================================

FORGERY_INDICATORS = (
    'photocopy',
    'duplicate',
    'not original',
    'reproduction',
    'digital copy',
    'scanned copy',
)

# OCR confidence below this raises LOW_OCR_CONFIDENCE
LOW_OCR_CONFIDENCE_THRESHOLD = 60.0

# ==============================================================================
# STATISTICAL RULES
# ==============================================================================

# Minimum VERIFIED records in institution+course aggregate
MIN_SAMPLE_SIZE = 10

CGPA_OUTLIER_DEVIATION = 2.0
PERCENTAGE_OUTLIER_DEVIATION = 20.0

# ==============================================================================
# RISK LEVELS
# ==============================================================================

RISK_LEVEL_HIGH = 'HIGH'
RISK_LEVEL_MEDIUM = 'MEDIUM'
RISK_LEVEL_LOW = 'LOW'
RISK_LEVEL_MINIMAL = 'MINIMAL'

RISK_LEVEL_THRESHOLDS = [
    (85, RISK_LEVEL_HIGH),
    (60, RISK_LEVEL_MEDIUM),
    (30, RISK_LEVEL_LOW),
]


__all__ = [
    'SEVERITY_DEDUCTIONS',
    'RISK_SCORES',
    'FINDING_CONFIDENCE',
    'CGPA_PERCENTAGE_FACTOR',
    'GRADE_INCONSISTENCY_MEDIUM_DEVIATION',
    'GRADE_INCONSISTENCY_HIGH_DEVIATION',
    'SUSPICIOUS_GRADE_PATTERN',
    'SEQUENTIAL_RUN_LENGTH',
    'SEQUENTIAL_HIGH_RUN_LENGTH',
    'REPEATED_DIGIT_MIN_LENGTH',
    'PLACEHOLDER_NAME_PATTERN',
    'INVALID_NAME_CHARACTERS',
    'CRITICAL_FIELDS',
    'FORGERY_INDICATORS',
    'LOW_OCR_CONFIDENCE_THRESHOLD',
    'MIN_SAMPLE_SIZE',
    'CGPA_OUTLIER_DEVIATION',
    'PERCENTAGE_OUTLIER_DEVIATION',
    'RISK_LEVEL_HIGH',
    'RISK_LEVEL_MEDIUM',
    'RISK_LEVEL_LOW',
    'RISK_LEVEL_MINIMAL',
    'RISK_LEVEL_THRESHOLDS',
]
