# Path: certverify/engine/tools/digest.py
"""
Canonical Certificate Digest

SHA-256 over a fixed, ordered tuple of certificate fields:
student name, certificate number, course, passing year,
institution id, issue date.

The fields are serialized as compact JSON with camelCase keys in that
order, which is the form digests were registered on the ledger with.
"""

import hashlib
import json
from datetime import date

DIGEST_FIELDS = (
    ('studentName', 'student_name'),
    ('certificateNumber', 'certificate_number'),
    ('course', 'course'),
    ('passingYear', 'passing_year'),
    ('institutionId', 'institution_id'),
    ('dateOfIssue', 'date_of_issue'),
)


def _canonical_value(value):
    if isinstance(value, date):
        return value.isoformat()
    return value


def canonical_payload(record) -> str:
    """
    Serialize the digest field tuple of a record.

    Args:
        record: CertificateRecord (or any object with the digest attributes)

    Returns:
        Compact JSON string with keys in digest order
    """
    payload = {
        key: _canonical_value(getattr(record, attribute, None))
        for key, attribute in DIGEST_FIELDS
    }
    return json.dumps(payload, separators=(',', ':'), ensure_ascii=False)


def compute_digest(record) -> str:
    """Hex SHA-256 digest of the canonical payload."""
    return hashlib.sha256(canonical_payload(record).encode('utf-8')).hexdigest()


__all__ = ['DIGEST_FIELDS', 'canonical_payload', 'compute_digest']
