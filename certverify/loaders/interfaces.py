# Path: certverify/loaders/interfaces.py
"""
Collaborator Interfaces

Capabilities the verification engine consumes. Implementations:
- loaders.memory_repository: in-memory repositories (JSON datasets, tests)
- database.repository: SQLAlchemy-backed repositories
- loaders.ledger_client: in-memory and HTTP ledger clients

Repository and ledger reads are coroutines; they are the only points
where a verification suspends. Implementations raise
CollaboratorUnavailable when the backing store cannot be reached.
"""

from typing import Optional, Protocol, runtime_checkable

from ..models import (
    AggregateStats,
    BlacklistEntry,
    BlacklistType,
    CandidateSubmission,
    CertificateRecord,
    Institution,
    LedgerValidation,
)


@runtime_checkable
class RecordRepository(Protocol):
    """Read access to stored certificates and the blacklist."""

    async def find_by_certificate_number(self, number: str) -> Optional[CertificateRecord]:
        ...

    async def find_by_name_roll_course_year(
        self,
        name: str,
        roll: Optional[str],
        course: Optional[str],
        year: Optional[int],
        institution_id: Optional[str],
    ) -> Optional[CertificateRecord]:
        """
        Fallback lookup: name matched case-insensitively by containment,
        the other arguments exactly when given (None ignores the field).
        """
        ...

    async def find_duplicates(
        self,
        candidate: CandidateSubmission,
        exclude_id: Optional[str],
        include_course: bool = True,
    ) -> list[CertificateRecord]:
        """
        Records sharing the certificate number, or sharing
        name + roll + year (+ course when include_course), other than exclude_id.
        The composite criterion applies only when the candidate has all its fields.
        """
        ...

    async def aggregate_stats(self, institution_id: str, course: str) -> AggregateStats:
        """Means and count over VERIFIED records of the institution + course."""
        ...

    async def find_blacklist_entry(
        self,
        entry_type: BlacklistType,
        identifier: str,
    ) -> Optional[BlacklistEntry]:
        """Active blacklist entry for the identifier, if any."""
        ...


@runtime_checkable
class InstitutionRepository(Protocol):
    """Read access to institutions."""

    async def find_by_id(self, institution_id: str) -> Optional[Institution]:
        ...


@runtime_checkable
class LedgerClient(Protocol):
    """Tamper-evidence ledger."""

    def digest(self, record: CertificateRecord) -> str:
        """Deterministic digest of the record's canonical field tuple."""
        ...

    async def validate(self, digest: str) -> LedgerValidation:
        ...


__all__ = ['RecordRepository', 'InstitutionRepository', 'LedgerClient']
