# Path: certverify/models/certificate.py
"""
Certificate Data Structures

Canonical stored entities (CertificateRecord, Institution, BlacklistEntry),
repository aggregates, and the ephemeral CandidateSubmission the engine
verifies.

CandidateSubmission can be built from an OCR result
({text, confidence, extractedFields}) or from a plain dict; both
accept camelCase or snake_case field names.
"""

from dataclasses import dataclass, field, fields, asdict
from datetime import date, datetime
from typing import Any, Optional

from ..constants import (
    DATE_FORMATS,
    MIN_PASSING_YEAR,
    MAX_CGPA,
    MAX_PERCENTAGE,
)
from .enums import CertificateStatus, BlacklistType


# Maximum |percentage - cgpa * factor| allowed on a stored record
RECORD_GRADE_TOLERANCE = 25.0
RECORD_CGPA_PERCENTAGE_FACTOR = 9.5

# camelCase names used by upstream OCR/JSON payloads
FIELD_ALIASES = {
    'id': 'id',
    'recordId': 'record_id',
    'certificateNumber': 'certificate_number',
    'studentName': 'student_name',
    'fatherName': 'father_name',
    'motherName': 'mother_name',
    'rollNumber': 'roll_number',
    'registrationNumber': 'registration_number',
    'passingYear': 'passing_year',
    'dateOfIssue': 'date_of_issue',
    'dateOfCompletion': 'date_of_completion',
    'institutionId': 'institution_id',
    'isLegacy': 'is_legacy',
    'blockchainHash': 'ledger_digest',
    'ledgerDigest': 'ledger_digest',
    'ocrText': 'ocr_text',
    'ocrConfidence': 'ocr_confidence',
    'isActive': 'is_active',
    'isVerified': 'is_verified',
}

_DATE_FIELDS = ('date_of_issue', 'date_of_completion')
_INT_FIELDS = ('passing_year',)
_FLOAT_FIELDS = ('cgpa', 'percentage', 'ocr_confidence')
_BOOL_FIELDS = ('is_legacy', 'is_active', 'is_verified')


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date from a date, datetime or string.

    Args:
        value: Raw value (ISO string, dd/mm/yyyy, date, datetime or None)

    Returns:
        date, or None when value is empty or unparseable
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    # ISO timestamps ("2023-06-15T00:00:00.000Z")
    if 'T' in text:
        text = text.split('T', 1)[0]

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_float(value: Any) -> Optional[float]:
    """Parse a float, tolerating '%' suffixes and blank strings."""
    if value is None or value == '':
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    try:
        return float(str(value).strip().rstrip('%').strip())
    except ValueError:
        return None


def parse_int(value: Any) -> Optional[int]:
    """Parse an integer (e.g. a year) from int, float or string."""
    number = parse_float(value)
    return int(number) if number is not None else None


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


def normalize_fields(raw: dict) -> dict:
    """
    Map camelCase keys to field names and coerce value types.

    Unknown keys are kept as-is; callers filter them against
    their dataclass fields.
    """
    normalized = {}
    for key, value in raw.items():
        name = FIELD_ALIASES.get(key, key)
        if isinstance(value, str):
            value = value.strip()
        if name in _DATE_FIELDS:
            value = parse_date(value)
        elif name in _INT_FIELDS:
            value = parse_int(value)
        elif name in _FLOAT_FIELDS:
            value = parse_float(value)
        elif name in _BOOL_FIELDS:
            value = parse_bool(value)
        elif value == '':
            value = None
        normalized[name] = value
    return normalized


def _known_fields(cls, values: dict) -> dict:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in values.items() if k in names}


@dataclass(frozen=True)
class CertificateRecord:
    """
    Canonical certificate stored by an institution.

    Attributes:
        id: Repository identifier
        certificate_number: Unique certificate number
        student_name: Student name as issued
        course: Course / degree name
        passing_year: Year of passing, bounded [1950, current year]
        date_of_issue: Issue date
        institution_id: Issuing institution reference
        father_name, mother_name: Optional parent names
        roll_number, registration_number: Optional student identifiers
        branch: Optional specialization
        grade: Optional letter grade / division
        cgpa: Optional CGPA on a 0-10 scale
        percentage: Optional percentage 0-100
        date_of_completion: Optional course completion date
        is_legacy: Issued before ledger integration
        ledger_digest: Digest registered on the ledger (None if never registered)
        status: Lifecycle status
    """
    id: str
    certificate_number: str
    student_name: str
    course: str
    passing_year: int
    date_of_issue: date
    institution_id: str
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    roll_number: Optional[str] = None
    registration_number: Optional[str] = None
    branch: Optional[str] = None
    grade: Optional[str] = None
    cgpa: Optional[float] = None
    percentage: Optional[float] = None
    date_of_completion: Optional[date] = None
    is_legacy: bool = False
    ledger_digest: Optional[str] = None
    status: CertificateStatus = CertificateStatus.PENDING

    @classmethod
    def from_dict(cls, data: dict) -> 'CertificateRecord':
        """Build a record from a JSON-style dict (camelCase or snake_case)."""
        values = _known_fields(cls, normalize_fields(data))
        status = values.get('status')
        if status is not None and not isinstance(status, CertificateStatus):
            values['status'] = CertificateStatus(str(status).upper())
        elif status is None:
            values.pop('status', None)
        return cls(**values)

    def to_dict(self) -> dict:
        data = asdict(self)
        data['status'] = self.status.value
        for name in _DATE_FIELDS:
            if data[name] is not None:
                data[name] = data[name].isoformat()
        return data


def validate_record(record: CertificateRecord, current_year: Optional[int] = None) -> list[str]:
    """
    Validate stored-record invariants.

    Args:
        record: Record to validate
        current_year: Upper bound for passing_year (defaults to this year)

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []
    current_year = current_year or date.today().year

    if not record.certificate_number:
        errors.append("Record missing certificate_number")
    if not record.student_name:
        errors.append("Record missing student_name")
    if not (MIN_PASSING_YEAR <= record.passing_year <= current_year):
        errors.append(
            f"passing_year {record.passing_year} outside [{MIN_PASSING_YEAR}, {current_year}]"
        )
    if record.cgpa is not None and not (0 <= record.cgpa <= MAX_CGPA):
        errors.append(f"cgpa {record.cgpa} outside [0, {MAX_CGPA:g}]")
    if record.percentage is not None and not (0 <= record.percentage <= MAX_PERCENTAGE):
        errors.append(f"percentage {record.percentage} outside [0, {MAX_PERCENTAGE:g}]")

    if record.cgpa is not None and record.percentage is not None:
        expected = record.cgpa * RECORD_CGPA_PERCENTAGE_FACTOR
        if abs(record.percentage - expected) > RECORD_GRADE_TOLERANCE:
            errors.append(
                f"cgpa {record.cgpa} and percentage {record.percentage} are inconsistent"
            )

    return errors


@dataclass(frozen=True)
class CandidateSubmission:
    """
    Certificate fields submitted for verification.

    Every field is optional and may be noisy (OCR output). The
    submission is discarded after verification.

    Attributes:
        record_id: Id of the stored record this submission re-verifies, if known
        ocr_text: Full OCR text, scanned for forgery indicators
        ocr_confidence: OCR engine confidence 0-100
        (remaining fields mirror CertificateRecord)
    """
    certificate_number: Optional[str] = None
    student_name: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    roll_number: Optional[str] = None
    registration_number: Optional[str] = None
    course: Optional[str] = None
    branch: Optional[str] = None
    passing_year: Optional[int] = None
    grade: Optional[str] = None
    cgpa: Optional[float] = None
    percentage: Optional[float] = None
    date_of_issue: Optional[date] = None
    date_of_completion: Optional[date] = None
    institution_id: Optional[str] = None
    is_legacy: bool = False
    ledger_digest: Optional[str] = None
    record_id: Optional[str] = None
    ocr_text: str = ''
    ocr_confidence: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'CandidateSubmission':
        """Build a submission from declared fields (camelCase or snake_case)."""
        values = _known_fields(cls, normalize_fields(data))
        if values.get('ocr_text') is None:
            values.pop('ocr_text', None)
        return cls(**values)

    @classmethod
    def from_ocr(cls, ocr_result: dict, **declared) -> 'CandidateSubmission':
        """
        Build a submission from an OCR result.

        Args:
            ocr_result: {'text': str, 'confidence': float, 'extractedFields': dict}
            **declared: Fields declared by the requester; they override
                OCR-extracted values (e.g. institution_id, record_id)

        Returns:
            CandidateSubmission
        """
        extracted = dict(ocr_result.get('extractedFields') or ocr_result.get('extracted_fields') or {})
        extracted.update(declared)
        extracted['ocr_text'] = ocr_result.get('text') or ''
        extracted['ocr_confidence'] = ocr_result.get('confidence')
        return cls.from_dict(extracted)

    def has_identity(self) -> bool:
        """True when the submission carries a certificate number or a student name."""
        return bool(self.certificate_number) or bool(self.student_name)

    def as_record(self) -> CertificateRecord:
        """
        View the submission as a record (for digesting unmatched submissions).

        Missing mandatory values become empty strings / zero so the
        digest stays deterministic.
        """
        return CertificateRecord(
            id=self.record_id or '',
            certificate_number=self.certificate_number or '',
            student_name=self.student_name or '',
            course=self.course or '',
            passing_year=self.passing_year or 0,
            date_of_issue=self.date_of_issue,
            institution_id=self.institution_id or '',
            roll_number=self.roll_number,
            grade=self.grade,
            cgpa=self.cgpa,
            percentage=self.percentage,
            date_of_completion=self.date_of_completion,
            is_legacy=self.is_legacy,
            ledger_digest=self.ledger_digest,
        )


@dataclass(frozen=True)
class Institution:
    """Issuing institution."""
    id: str
    name: str
    code: Optional[str] = None
    is_active: bool = True
    is_verified: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> 'Institution':
        return cls(**_known_fields(cls, normalize_fields(data)))

    @property
    def is_in_good_standing(self) -> bool:
        return self.is_active and self.is_verified


@dataclass(frozen=True)
class BlacklistEntry:
    """A blacklisted certificate number or student name."""
    entry_type: BlacklistType
    identifier: str
    reason: str = ''
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> 'BlacklistEntry':
        values = normalize_fields(data)
        raw_type = values.get('entry_type') or values.get('type')
        return cls(
            entry_type=BlacklistType(str(raw_type).upper()),
            identifier=values['identifier'],
            reason=values.get('reason') or '',
            is_active=values.get('is_active', True),
        )


@dataclass(frozen=True)
class AggregateStats:
    """
    Aggregate of VERIFIED records for one institution + course.

    Means are None when no record in the sample carries the value.
    """
    mean_cgpa: Optional[float] = None
    mean_percentage: Optional[float] = None
    sample_size: int = 0


@dataclass(frozen=True)
class LedgerValidation:
    """Answer from the ledger for one digest."""
    exists: bool
    payload: dict = field(default_factory=dict)


__all__ = [
    'CertificateRecord',
    'CandidateSubmission',
    'Institution',
    'BlacklistEntry',
    'AggregateStats',
    'LedgerValidation',
    'validate_record',
    'normalize_fields',
    'parse_date',
    'parse_float',
    'parse_int',
    'parse_bool',
    'FIELD_ALIASES',
]
