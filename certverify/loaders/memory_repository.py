# Path: certverify/loaders/memory_repository.py
"""
In-Memory Repositories

Dict-backed RecordRepository and InstitutionRepository. Used for JSON
datasets (CLI) and tests. Records are validated on insert with the
same invariants the upload path enforces.
"""

import json
from pathlib import Path
from statistics import fmean
from typing import Iterable, Optional

from ..constants import LOG_INPUT
from ..core.logger import get_input_logger
from ..exceptions import InputError
from ..models import (
    AggregateStats,
    BlacklistEntry,
    BlacklistType,
    CandidateSubmission,
    CertificateRecord,
    CertificateStatus,
    Institution,
    validate_record,
)
from ..engine.tools.similarity import normalize_text


class InMemoryRecordRepository:
    """
    Certificate and blacklist store held in memory.

    Example:
        records = InMemoryRecordRepository()
        records.add_record(record)
        found = await records.find_by_certificate_number('RU/2023/BSC/001')
    """

    def __init__(
        self,
        records: Iterable[CertificateRecord] = (),
        blacklist: Iterable[BlacklistEntry] = (),
        enforce_unique_numbers: bool = True,
    ):
        """
        Args:
            records: Initial records (validated)
            blacklist: Initial blacklist entries
            enforce_unique_numbers: Reject a second record with the same
                certificate number. Disable to load legacy data that
                already contains duplicates.
        """
        self.logger = get_input_logger('memory_repository')
        self.enforce_unique_numbers = enforce_unique_numbers
        self._records: dict[str, CertificateRecord] = {}
        self._blacklist: list[BlacklistEntry] = []

        for record in records:
            self.add_record(record)
        for entry in blacklist:
            self.add_blacklist_entry(entry)

    def add_record(self, record: CertificateRecord) -> None:
        """
        Store a record.

        Raises:
            InputError: If the record violates an invariant or its id /
                certificate number is already taken
        """
        errors = validate_record(record)
        if errors:
            raise InputError(f"Invalid record {record.id}: {'; '.join(errors)}")
        if record.id in self._records:
            raise InputError(f"Record id {record.id} already exists")
        if self.enforce_unique_numbers and self._by_number(record.certificate_number):
            raise InputError(
                f"Certificate number {record.certificate_number} already exists"
            )
        self._records[record.id] = record

    def add_blacklist_entry(self, entry: BlacklistEntry) -> None:
        self._blacklist.append(entry)

    def _by_number(self, number: str) -> list[CertificateRecord]:
        wanted = number.strip()
        return [r for r in self._records.values() if r.certificate_number == wanted]

    def __len__(self) -> int:
        return len(self._records)

    async def find_by_certificate_number(self, number: str) -> Optional[CertificateRecord]:
        self.logger.debug(f"{LOG_INPUT} Lookup by certificate number {number}")
        matches = self._by_number(number) if number else []
        return matches[0] if matches else None

    async def find_by_name_roll_course_year(
        self,
        name: str,
        roll: Optional[str],
        course: Optional[str],
        year: Optional[int],
        institution_id: Optional[str],
    ) -> Optional[CertificateRecord]:
        wanted_name = normalize_text(name)
        if not wanted_name:
            return None

        for record in self._records.values():
            if wanted_name not in normalize_text(record.student_name):
                continue
            if roll is not None and record.roll_number != roll:
                continue
            if course is not None and normalize_text(record.course) != normalize_text(course):
                continue
            if year is not None and record.passing_year != year:
                continue
            if institution_id is not None and record.institution_id != institution_id:
                continue
            return record

        return None

    async def find_duplicates(
        self,
        candidate: CandidateSubmission,
        exclude_id: Optional[str],
        include_course: bool = True,
    ) -> list[CertificateRecord]:
        composite_fields = ['student_name', 'roll_number', 'passing_year']
        if include_course:
            composite_fields.append('course')
        use_composite = all(getattr(candidate, f) for f in composite_fields)

        duplicates = []
        for record in self._records.values():
            if exclude_id is not None and record.id == exclude_id:
                continue
            same_number = (
                bool(candidate.certificate_number)
                and record.certificate_number == candidate.certificate_number
            )
            same_identity = use_composite and all(
                getattr(record, f) == getattr(candidate, f) for f in composite_fields
            )
            if same_number or same_identity:
                duplicates.append(record)

        return duplicates

    async def aggregate_stats(self, institution_id: str, course: str) -> AggregateStats:
        sample = [
            r for r in self._records.values()
            if r.institution_id == institution_id
            and r.course == course
            and r.status is CertificateStatus.VERIFIED
        ]
        cgpas = [r.cgpa for r in sample if r.cgpa is not None]
        percentages = [r.percentage for r in sample if r.percentage is not None]

        return AggregateStats(
            mean_cgpa=fmean(cgpas) if cgpas else None,
            mean_percentage=fmean(percentages) if percentages else None,
            sample_size=len(sample),
        )

    async def find_blacklist_entry(
        self,
        entry_type: BlacklistType,
        identifier: str,
    ) -> Optional[BlacklistEntry]:
        wanted = normalize_text(identifier)
        for entry in self._blacklist:
            if (
                entry.is_active
                and entry.entry_type is entry_type
                and normalize_text(entry.identifier) == wanted
            ):
                return entry
        return None


class InMemoryInstitutionRepository:
    """Institution store held in memory."""

    def __init__(self, institutions: Iterable[Institution] = ()):
        self._institutions = {i.id: i for i in institutions}

    def add(self, institution: Institution) -> None:
        self._institutions[institution.id] = institution

    async def find_by_id(self, institution_id: str) -> Optional[Institution]:
        return self._institutions.get(institution_id)


def load_dataset(
    path: Path,
    enforce_unique_numbers: bool = True,
) -> tuple[InMemoryRecordRepository, InMemoryInstitutionRepository]:
    """
    Load repositories from a JSON dataset file.

    Expected layout:
        {
            "institutions": [{"id": ..., "name": ..., "isActive": ..., "isVerified": ...}],
            "certificates": [{"id": ..., "certificateNumber": ..., ...}],
            "blacklist": [{"type": "CERTIFICATE", "identifier": ..., "reason": ...}]
        }

    Args:
        path: Dataset file
        enforce_unique_numbers: See InMemoryRecordRepository

    Returns:
        (record repository, institution repository)

    Raises:
        InputError: If a record violates an invariant
    """
    logger = get_input_logger('dataset')
    logger.info(f"{LOG_INPUT} Loading dataset {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    institutions = [Institution.from_dict(i) for i in data.get('institutions', [])]
    records = [CertificateRecord.from_dict(c) for c in data.get('certificates', [])]
    blacklist = [BlacklistEntry.from_dict(b) for b in data.get('blacklist', [])]

    record_repo = InMemoryRecordRepository(
        records, blacklist, enforce_unique_numbers=enforce_unique_numbers
    )
    institution_repo = InMemoryInstitutionRepository(institutions)

    logger.info(
        f"{LOG_INPUT} Loaded {len(records)} certificates, "
        f"{len(institutions)} institutions, {len(blacklist)} blacklist entries"
    )
    return record_repo, institution_repo


__all__ = [
    'InMemoryRecordRepository',
    'InMemoryInstitutionRepository',
    'load_dataset',
]
