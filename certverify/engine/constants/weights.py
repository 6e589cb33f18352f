# Path: certverify/engine/constants/weights.py
"""
Scoring Weights and Thresholds

How much each check contributes to the overall confidence, how much each
field contributes to the record match score, and the thresholds that
turn scores into decisions.

All values can be overridden through EngineSettings (see
certverify/engine/settings.py), which reads CERTVERIFY_* env vars.
"""

from decimal import Decimal

from ...constants import (
    CHECK_RECORD_MATCH,
    CHECK_LEDGER,
    CHECK_ANOMALY_DETECTION,
    CHECK_INSTITUTION,
    CHECK_DUPLICATE,
)


# ==============================================================================
# CHECK WEIGHTS
# ==============================================================================
# Decimal so the weights sum to exactly 1 and the weighted average is exact.

CHECK_WEIGHTS = {
    CHECK_RECORD_MATCH: Decimal('0.4'),
    CHECK_LEDGER: Decimal('0.2'),
    CHECK_ANOMALY_DETECTION: Decimal('0.2'),
    CHECK_INSTITUTION: Decimal('0.1'),
    CHECK_DUPLICATE: Decimal('0.1'),
}

# ==============================================================================
# DECISION THRESHOLDS
# ==============================================================================

# overall_confidence at or above this is a valid certificate
VALIDITY_THRESHOLD = 75

# record match score at or above this accepts the match
MATCH_THRESHOLD = 80

# ==============================================================================
# RECORD MATCH FIELD WEIGHTS
# ==============================================================================

FIELD_STUDENT_NAME = 'student_name'
FIELD_CERTIFICATE_NUMBER = 'certificate_number'
FIELD_COURSE = 'course'
FIELD_PASSING_YEAR = 'passing_year'
FIELD_ROLL_NUMBER = 'roll_number'
FIELD_GRADE = 'grade'
FIELD_CGPA = 'cgpa'
FIELD_PERCENTAGE = 'percentage'
FIELD_DATE_OF_ISSUE = 'date_of_issue'

MATCH_FIELD_WEIGHTS = {
    FIELD_STUDENT_NAME: 25,
    FIELD_CERTIFICATE_NUMBER: 20,
    FIELD_COURSE: 15,
    FIELD_PASSING_YEAR: 10,
    FIELD_ROLL_NUMBER: 10,
    FIELD_GRADE: 5,
    FIELD_CGPA: 5,
    FIELD_PERCENTAGE: 5,
    FIELD_DATE_OF_ISSUE: 5,
}

# Compared with similarity(); every other field is exact
FUZZY_MATCH_FIELDS = {FIELD_STUDENT_NAME, FIELD_COURSE}

# Issue-date scoring
DATE_EXACT_SCORE = 1.0
DATE_NEAR_SCORE = 0.8
DATE_NEAR_DAYS = 7

# ==============================================================================
# CONFIDENCE CONSTANTS
# ==============================================================================

CONFIDENCE_MIN = 0
CONFIDENCE_MAX = 100

# Ledger check outcomes
LEDGER_CONFIRMED_CONFIDENCE = 100
LEGACY_CERTIFICATE_CONFIDENCE = 60

# Institution present but inactive or unverified
INSTITUTION_NOT_IN_GOOD_STANDING_CONFIDENCE = 20


__all__ = [
    'CHECK_WEIGHTS',
    'VALIDITY_THRESHOLD',
    'MATCH_THRESHOLD',
    'FIELD_STUDENT_NAME',
    'FIELD_CERTIFICATE_NUMBER',
    'FIELD_COURSE',
    'FIELD_PASSING_YEAR',
    'FIELD_ROLL_NUMBER',
    'FIELD_GRADE',
    'FIELD_CGPA',
    'FIELD_PERCENTAGE',
    'FIELD_DATE_OF_ISSUE',
    'MATCH_FIELD_WEIGHTS',
    'FUZZY_MATCH_FIELDS',
    'DATE_EXACT_SCORE',
    'DATE_NEAR_SCORE',
    'DATE_NEAR_DAYS',
    'CONFIDENCE_MIN',
    'CONFIDENCE_MAX',
    'LEDGER_CONFIRMED_CONFIDENCE',
    'LEGACY_CERTIFICATE_CONFIDENCE',
    'INSTITUTION_NOT_IN_GOOD_STANDING_CONFIDENCE',
]
