# Path: certverify/database/tables.py
"""
Certificate Verification Tables

- institutions: issuing institutions
- certificates: canonical certificate records
- blacklisted_entities: blacklisted certificate numbers and student names

Rows convert to and from the frozen model dataclasses; the engine
never sees ORM objects.
"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.sql import func

from ..models import (
    BlacklistEntry,
    BlacklistType,
    CertificateRecord,
    CertificateStatus,
    Institution,
)
from .base import Base

MAX_ID_LENGTH = 64
MAX_NUMBER_LENGTH = 100
MAX_NAME_LENGTH = 255
MAX_STATUS_LENGTH = 20
MAX_DIGEST_LENGTH = 128


class InstitutionRow(Base):
    """Issuing institution."""
    __tablename__ = 'institutions'

    id = Column(String(MAX_ID_LENGTH), primary_key=True, comment="Institution identifier")
    name = Column(String(MAX_NAME_LENGTH), nullable=False, comment="Institution name")
    code = Column(String(MAX_NUMBER_LENGTH), unique=True, nullable=True, comment="Short code")
    is_active = Column(Boolean, nullable=False, default=True, comment="Currently operating")
    is_verified = Column(Boolean, nullable=False, default=False, comment="Vetted by the registry")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_model(self) -> Institution:
        return Institution(
            id=self.id,
            name=self.name,
            code=self.code,
            is_active=bool(self.is_active),
            is_verified=bool(self.is_verified),
        )

    @classmethod
    def from_model(cls, institution: Institution) -> 'InstitutionRow':
        return cls(
            id=institution.id,
            name=institution.name,
            code=institution.code,
            is_active=institution.is_active,
            is_verified=institution.is_verified,
        )


class CertificateRow(Base):
    """
    Canonical certificate record.

    certificate_number is unique; duplicate-number detection therefore
    only triggers for data loaded outside this table's constraint.
    """
    __tablename__ = 'certificates'

    id = Column(String(MAX_ID_LENGTH), primary_key=True, comment="Record identifier")
    certificate_number = Column(
        String(MAX_NUMBER_LENGTH),
        unique=True,
        nullable=False,
        comment="Certificate number printed on the document"
    )
    student_name = Column(String(MAX_NAME_LENGTH), nullable=False)
    father_name = Column(String(MAX_NAME_LENGTH), nullable=True)
    mother_name = Column(String(MAX_NAME_LENGTH), nullable=True)
    roll_number = Column(String(MAX_NUMBER_LENGTH), nullable=True)
    registration_number = Column(String(MAX_NUMBER_LENGTH), nullable=True)
    course = Column(String(MAX_NAME_LENGTH), nullable=False)
    branch = Column(String(MAX_NAME_LENGTH), nullable=True)
    passing_year = Column(Integer, nullable=False)
    grade = Column(String(MAX_STATUS_LENGTH), nullable=True)
    cgpa = Column(Float, nullable=True, comment="CGPA on a 0-10 scale")
    percentage = Column(Float, nullable=True, comment="Percentage 0-100")
    date_of_issue = Column(Date, nullable=False)
    date_of_completion = Column(Date, nullable=True)
    institution_id = Column(
        String(MAX_ID_LENGTH),
        ForeignKey('institutions.id'),
        nullable=False,
        comment="Issuing institution"
    )
    is_legacy = Column(Boolean, nullable=False, default=False, comment="Issued before ledger integration")
    ledger_digest = Column(String(MAX_DIGEST_LENGTH), nullable=True, comment="Digest registered on the ledger")
    status = Column(
        String(MAX_STATUS_LENGTH),
        nullable=False,
        default=CertificateStatus.PENDING.value,
        comment="PENDING, VERIFIED, REJECTED or FLAGGED"
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_certificates_identity', 'student_name', 'roll_number', 'passing_year'),
        Index('idx_certificates_aggregate', 'institution_id', 'course', 'status'),
    )

    def to_model(self) -> CertificateRecord:
        return CertificateRecord(
            id=self.id,
            certificate_number=self.certificate_number,
            student_name=self.student_name,
            father_name=self.father_name,
            mother_name=self.mother_name,
            roll_number=self.roll_number,
            registration_number=self.registration_number,
            course=self.course,
            branch=self.branch,
            passing_year=self.passing_year,
            grade=self.grade,
            cgpa=self.cgpa,
            percentage=self.percentage,
            date_of_issue=self.date_of_issue,
            date_of_completion=self.date_of_completion,
            institution_id=self.institution_id,
            is_legacy=bool(self.is_legacy),
            ledger_digest=self.ledger_digest,
            status=CertificateStatus(self.status),
        )

    @classmethod
    def from_model(cls, record: CertificateRecord) -> 'CertificateRow':
        return cls(
            id=record.id,
            certificate_number=record.certificate_number,
            student_name=record.student_name,
            father_name=record.father_name,
            mother_name=record.mother_name,
            roll_number=record.roll_number,
            registration_number=record.registration_number,
            course=record.course,
            branch=record.branch,
            passing_year=record.passing_year,
            grade=record.grade,
            cgpa=record.cgpa,
            percentage=record.percentage,
            date_of_issue=record.date_of_issue,
            date_of_completion=record.date_of_completion,
            institution_id=record.institution_id,
            is_legacy=record.is_legacy,
            ledger_digest=record.ledger_digest,
            status=record.status.value,
        )


class BlacklistRow(Base):
    """Blacklisted certificate number or student name."""
    __tablename__ = 'blacklisted_entities'

    id = Column(Integer, primary_key=True, autoincrement=True)
    entry_type = Column(String(MAX_STATUS_LENGTH), nullable=False, comment="CERTIFICATE or STUDENT")
    identifier = Column(String(MAX_NAME_LENGTH), nullable=False, comment="Certificate number or student name")
    reason = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_blacklist_lookup', 'entry_type', 'identifier'),
    )

    def to_model(self) -> BlacklistEntry:
        return BlacklistEntry(
            entry_type=BlacklistType(self.entry_type),
            identifier=self.identifier,
            reason=self.reason or '',
            is_active=bool(self.is_active),
        )

    @classmethod
    def from_model(cls, entry: BlacklistEntry) -> 'BlacklistRow':
        return cls(
            entry_type=entry.entry_type.value,
            identifier=entry.identifier,
            reason=entry.reason,
            is_active=entry.is_active,
        )


__all__ = ['InstitutionRow', 'CertificateRow', 'BlacklistRow']
