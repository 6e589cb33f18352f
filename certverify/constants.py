# Path: certverify/constants.py
"""
Certificate Verification Constants

Module-wide constants for the certificate verification system.
Engine tuning values (weights, thresholds, deductions) live in
certverify/engine/constants/.
"""

# ==============================================================================
# CHECK NAMES
# ==============================================================================
# Keys of VerificationResult.checks, in dispatch order.

CHECK_RECORD_MATCH = 'record_match'
CHECK_LEDGER = 'ledger_check'
CHECK_ANOMALY_DETECTION = 'anomaly_detection'
CHECK_INSTITUTION = 'institution_check'
CHECK_DUPLICATE = 'duplicate_check'

CHECK_NAMES = [
    CHECK_RECORD_MATCH,
    CHECK_LEDGER,
    CHECK_ANOMALY_DETECTION,
    CHECK_INSTITUTION,
    CHECK_DUPLICATE,
]

# Flagged-reason prefix used for orchestration-level failures
VERIFICATION_REASON_PREFIX = 'verification'

# ==============================================================================
# IPO LOGGING PREFIXES
# ==============================================================================
LOG_INPUT = '[INPUT]'
LOG_PROCESS = '[PROCESS]'
LOG_OUTPUT = '[OUTPUT]'

# Logger name roots used by the IPO filters
LOGGER_INPUT = 'input'
LOGGER_PROCESS = 'process'
LOGGER_OUTPUT = 'output'

LOG_FORMAT = '[%(levelname)s] %(name)s - %(message)s'

# ==============================================================================
# RECORD BOUNDS
# ==============================================================================
MIN_PASSING_YEAR = 1950
MAX_CGPA = 10.0
MAX_PERCENTAGE = 100.0

# ==============================================================================
# DATE FORMATS
# ==============================================================================
# Accepted when parsing OCR-extracted or JSON date strings
DATE_FORMATS = [
    '%Y-%m-%d',
    '%d/%m/%Y',
    '%d-%m-%Y',
    '%d.%m.%Y',
]

# ==============================================================================
# FILE NAMES
# ==============================================================================
REPORT_FILE = 'verification_report.json'
ENV_FILE = '.env'


__all__ = [
    'CHECK_RECORD_MATCH',
    'CHECK_LEDGER',
    'CHECK_ANOMALY_DETECTION',
    'CHECK_INSTITUTION',
    'CHECK_DUPLICATE',
    'CHECK_NAMES',
    'VERIFICATION_REASON_PREFIX',
    'LOG_INPUT',
    'LOG_PROCESS',
    'LOG_OUTPUT',
    'LOGGER_INPUT',
    'LOGGER_PROCESS',
    'LOGGER_OUTPUT',
    'LOG_FORMAT',
    'MIN_PASSING_YEAR',
    'MAX_CGPA',
    'MAX_PERCENTAGE',
    'DATE_FORMATS',
    'REPORT_FILE',
    'ENV_FILE',
]
