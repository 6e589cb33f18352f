# Path: certverify/tests/test_sql_repository.py
"""SQLAlchemy repositories against a SQLite file."""

import asyncio

import pytest

from certverify.database import Database, SqlInstitutionRepository, SqlRecordRepository
from certverify.engine import VerificationOrchestrator
from certverify.exceptions import CollaboratorUnavailable, ConfigurationError, InputError
from certverify.loaders import InMemoryLedger
from certverify.models import BlacklistEntry, BlacklistType, CertificateStatus, VerificationState
from certverify.tests.fixtures import (
    TODAY,
    create_candidate,
    create_institution,
    create_record,
    registered,
)


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'certificates.db'}")
    db.create_all_tables()
    yield db
    db.dispose()


@pytest.fixture
def sql_repositories(database):
    records = SqlRecordRepository(database)
    institutions = SqlInstitutionRepository(database)
    institutions.add(create_institution())
    return records, institutions


class TestSqlRecordRepository:

    def test_missing_url_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            Database('')

    def test_record_round_trip(self, sql_repositories):
        records, _ = sql_repositories
        record = create_record(ledger_digest='ab' * 32, grade='A')
        records.add_record(record)

        assert asyncio.run(records.find_by_certificate_number('RU/2023/BSC/001')) == record
        assert asyncio.run(records.find_by_certificate_number('RU/2023/BSC/404')) is None

    def test_duplicate_certificate_number_is_rejected(self, sql_repositories):
        records, _ = sql_repositories
        records.add_record(create_record())

        with pytest.raises(InputError):
            records.add_record(create_record(id='rec-002'))

    def test_invalid_record_is_rejected(self, sql_repositories):
        records, _ = sql_repositories
        with pytest.raises(InputError):
            records.add_record(create_record(passing_year=1900))

    def test_fallback_lookup(self, sql_repositories):
        records, _ = sql_repositories
        records.add_record(create_record())

        found = asyncio.run(records.find_by_name_roll_course_year(
            'Rahul Kumar', 'RU23CS045', 'B.Sc CS', 2023, 'inst-ru'
        ))
        assert found.id == 'rec-001'

    def test_fallback_lookup_treats_wildcards_literally(self, sql_repositories):
        records, _ = sql_repositories
        records.add_record(create_record(student_name='Rahul Kumar Singh'))
        records.add_record(create_record(
            id='rec-002', certificate_number='RU/2023/BSC/002', student_name='Anita_Sharma', roll_number='RU23CS050',
        ))

        assert asyncio.run(records.find_by_name_roll_course_year('Rahul_Kumar', None, None, None, None)) is None
        assert asyncio.run(records.find_by_name_roll_course_year('%', None, None, None, None)) is None
        found = asyncio.run(records.find_by_name_roll_course_year('anita_sharma', None, None, None, None))
        assert found.id == 'rec-002'

    def test_fallback_lookup_normalizes_both_sides(self, sql_repositories):
        records, _ = sql_repositories
        records.add_record(create_record(student_name='Rahul  Kumar\tSingh', course='B.Sc  CS'))

        found = asyncio.run(records.find_by_name_roll_course_year(
            ' rahul kumar ', 'RU23CS045', 'b.sc cs', 2023, 'inst-ru'
        ))
        assert found.id == 'rec-001'

    def test_find_duplicates_excludes_own_record(self, sql_repositories):
        records, _ = sql_repositories
        records.add_record(create_record())
        records.add_record(create_record(id='rec-002', certificate_number='RU/2023/BSC/002'))

        duplicates = asyncio.run(records.find_duplicates(
            create_candidate(roll_number='RU23CS045'), exclude_id='rec-001'
        ))
        assert [r.id for r in duplicates] == ['rec-002']

        assert asyncio.run(records.find_duplicates(create_candidate(certificate_number=None), None)) == []

    def test_aggregate_stats_and_status_updates(self, sql_repositories):
        records, _ = sql_repositories
        records.add_record(create_record(cgpa=8.0, percentage=None))
        records.add_record(create_record(id='rec-002', certificate_number='N/2', cgpa=6.0, percentage=None))
        records.update_status('rec-002', CertificateStatus.REJECTED)

        stats = asyncio.run(records.aggregate_stats('inst-ru', 'B.Sc CS'))

        assert stats.sample_size == 1
        assert stats.mean_cgpa == pytest.approx(8.0)
        assert stats.mean_percentage is None

        with pytest.raises(InputError):
            records.update_status('missing', CertificateStatus.VERIFIED)

    def test_blacklist_lookup(self, sql_repositories):
        records, _ = sql_repositories
        records.add_blacklist_entry(BlacklistEntry(BlacklistType.STUDENT, 'Rahul Kumar Singh', 'Fraud'))
        records.add_blacklist_entry(BlacklistEntry(BlacklistType.CERTIFICATE, 'X/1', is_active=False))

        entry = asyncio.run(records.find_blacklist_entry(BlacklistType.STUDENT, ' rahul  KUMAR singh'))
        assert entry.reason == 'Fraud'
        assert asyncio.run(records.find_blacklist_entry(BlacklistType.CERTIFICATE, 'X/1')) is None

    def test_blacklist_identifiers_are_normalized_on_both_sides(self, sql_repositories):
        records, _ = sql_repositories
        records.add_blacklist_entry(BlacklistEntry(BlacklistType.STUDENT, '  Anita   SHARMA ', 'Forged marksheet'))

        entry = asyncio.run(records.find_blacklist_entry(BlacklistType.STUDENT, 'anita sharma'))
        assert entry.reason == 'Forged marksheet'


class TestSqlInstitutions:

    def test_institution_lookup(self, sql_repositories):
        _, institutions = sql_repositories
        assert asyncio.run(institutions.find_by_id('inst-ru')).is_in_good_standing
        assert asyncio.run(institutions.find_by_id('inst-missing')) is None


class TestSqlVerification:

    def test_database_errors_surface_as_unavailable(self, database, sql_repositories):
        records, _ = sql_repositories
        database.drop_all_tables()

        with pytest.raises(CollaboratorUnavailable) as exc_info:
            asyncio.run(records.find_by_certificate_number('RU/2023/BSC/001'))
        assert exc_info.value.collaborator == 'repository'

    def test_end_to_end_verification(self, sql_repositories):
        records, institutions = sql_repositories
        ledger = InMemoryLedger()
        records.add_record(registered(create_record(), ledger))
        orchestrator = VerificationOrchestrator(records, institutions, ledger, today=lambda: TODAY)

        result = asyncio.run(orchestrator.verify(create_candidate()))

        assert result.state is VerificationState.COMPLETED
        assert result.is_valid
        assert result.overall_confidence == 100
