# Path: certverify/tests/fixtures.py
"""
Test Fixtures for Certificate Verification

Factories for records, submissions and collaborators, plus collaborator
doubles that are slow or unavailable.
"""

import asyncio
from dataclasses import replace
from datetime import date

from certverify.exceptions import CollaboratorUnavailable
from certverify.models import (
    CandidateSubmission,
    CertificateRecord,
    CertificateStatus,
    Institution,
)
from certverify.loaders import (
    InMemoryRecordRepository,
    InMemoryInstitutionRepository,
    InMemoryLedger,
)

# Fixed clock for the temporal rules
TODAY = date(2024, 6, 1)

INSTITUTION_ID = 'inst-ru'


def create_record(**overrides) -> CertificateRecord:
    """Clean, VERIFIED, non-legacy record (no digest unless given)."""
    values = dict(
        id='rec-001',
        certificate_number='RU/2023/BSC/001',
        student_name='Rahul Kumar Singh',
        course='B.Sc CS',
        passing_year=2023,
        date_of_issue=date(2023, 7, 15),
        institution_id=INSTITUTION_ID,
        roll_number='RU23CS045',
        cgpa=8.2,
        percentage=80.0,
        status=CertificateStatus.VERIFIED,
    )
    values.update(overrides)
    return CertificateRecord(**values)


def create_candidate(**overrides) -> CandidateSubmission:
    """Submission carrying the fields of create_record()."""
    values = dict(
        certificate_number='RU/2023/BSC/001',
        student_name='Rahul Kumar Singh',
        course='B.Sc CS',
        passing_year=2023,
        cgpa=8.2,
        percentage=80.0,
    )
    values.update(overrides)
    return CandidateSubmission(**values)


def create_institution(**overrides) -> Institution:
    values = dict(
        id=INSTITUTION_ID,
        name='Ranchi University',
        code='RU',
        is_active=True,
        is_verified=True,
    )
    values.update(overrides)
    return Institution(**values)


def registered(record: CertificateRecord, ledger: InMemoryLedger) -> CertificateRecord:
    """Register the record on the ledger and return it carrying its digest."""
    return replace(record, ledger_digest=ledger.register(record))


def create_environment(*records: CertificateRecord, institutions=None, enforce_unique_numbers=True):
    """(record repository, institution repository) holding the given data."""
    record_repo = InMemoryRecordRepository(records, enforce_unique_numbers=enforce_unique_numbers)
    institution_repo = InMemoryInstitutionRepository(
        institutions if institutions is not None else [create_institution()]
    )
    return record_repo, institution_repo


# ==============================================================================
# COLLABORATOR DOUBLES
# ==============================================================================

class SlowRecordRepository:
    """Delegates to another repository after a delay on every call."""

    def __init__(self, inner, delay: float):
        self.inner = inner
        self.delay = delay

    async def find_by_certificate_number(self, number):
        await asyncio.sleep(self.delay)
        return await self.inner.find_by_certificate_number(number)

    async def find_by_name_roll_course_year(self, *args):
        await asyncio.sleep(self.delay)
        return await self.inner.find_by_name_roll_course_year(*args)

    async def find_duplicates(self, *args, **kwargs):
        await asyncio.sleep(self.delay)
        return await self.inner.find_duplicates(*args, **kwargs)

    async def aggregate_stats(self, *args):
        await asyncio.sleep(self.delay)
        return await self.inner.aggregate_stats(*args)

    async def find_blacklist_entry(self, *args):
        await asyncio.sleep(self.delay)
        return await self.inner.find_blacklist_entry(*args)


class UnavailableRecordRepository:
    """Every call fails as if the database were down."""

    async def _fail(self, *args, **kwargs):
        raise CollaboratorUnavailable('connection refused', collaborator='repository')

    find_by_certificate_number = _fail
    find_by_name_roll_course_year = _fail
    find_duplicates = _fail
    aggregate_stats = _fail
    find_blacklist_entry = _fail


class UnavailableInstitutionRepository:

    async def find_by_id(self, institution_id):
        raise CollaboratorUnavailable('institution service timeout', collaborator='institutions')


class UnavailableLedger(InMemoryLedger):

    async def validate(self, digest):
        raise CollaboratorUnavailable('ledger node unreachable', collaborator='ledger')
