# Path: certverify/tests/test_repositories.py
"""In-memory repositories, dataset loading and submission parsing."""

import asyncio
import json
from datetime import date

import pytest

from certverify.exceptions import InputError
from certverify.loaders import InMemoryLedger, load_dataset
from certverify.models import (
    BlacklistType,
    CandidateSubmission,
    CertificateRecord,
    CertificateStatus,
)
from certverify.models.certificate import parse_date, parse_float, validate_record
from certverify.tests.fixtures import create_candidate, create_environment, create_record


# ==============================================================================
# RECORD INVARIANTS
# ==============================================================================

class TestRecordInvariants:

    def test_clean_record_validates(self):
        assert validate_record(create_record(), current_year=2024) == []

    @pytest.mark.parametrize('overrides, fragment', [
        ({'passing_year': 1949}, 'passing_year'),
        ({'passing_year': 2025}, 'passing_year'),
        ({'cgpa': 10.5, 'percentage': None}, 'cgpa'),
        ({'percentage': 101.0, 'cgpa': None}, 'percentage'),
        ({'cgpa': 9.0, 'percentage': 40.0}, 'inconsistent'),
        ({'certificate_number': ''}, 'certificate_number'),
    ])
    def test_record_invariants(self, overrides, fragment):
        errors = validate_record(create_record(**overrides), current_year=2024)
        assert any(fragment in e for e in errors)

    def test_repository_rejects_invalid_records(self):
        records, _ = create_environment()
        with pytest.raises(InputError):
            records.add_record(create_record(cgpa=11.0, percentage=None))

    def test_repository_enforces_unique_numbers(self):
        records, _ = create_environment(create_record())
        with pytest.raises(InputError):
            records.add_record(create_record(id='rec-002'))

    def test_repository_rejects_duplicate_ids(self):
        records, _ = create_environment(create_record(), enforce_unique_numbers=False)
        with pytest.raises(InputError):
            records.add_record(create_record(certificate_number='RU/2023/BSC/002'))


# ==============================================================================
# LOOKUPS
# ==============================================================================

class TestInMemoryLookups:

    def test_find_by_certificate_number(self):
        records, _ = create_environment(create_record())

        assert asyncio.run(records.find_by_certificate_number('RU/2023/BSC/001')).id == 'rec-001'
        assert asyncio.run(records.find_by_certificate_number(' RU/2023/BSC/001 ')).id == 'rec-001'
        assert asyncio.run(records.find_by_certificate_number('RU/2023/BSC/404')) is None

    def test_find_by_name_roll_course_year(self):
        records, _ = create_environment(create_record())

        found = asyncio.run(records.find_by_name_roll_course_year(
            'rahul kumar', 'RU23CS045', 'b.sc cs', 2023, 'inst-ru'
        ))
        assert found.id == 'rec-001'

        missing = asyncio.run(records.find_by_name_roll_course_year(
            'Rahul Kumar Singh', 'RU23CS045', None, 2022, None
        ))
        assert missing is None

    def test_find_duplicates_by_composite_identity(self):
        other = create_record(id='rec-002', certificate_number='RU/2023/BSC/777')
        records, _ = create_environment(create_record(), other)
        candidate = create_candidate(roll_number='RU23CS045')

        duplicates = asyncio.run(records.find_duplicates(candidate, exclude_id='rec-001'))
        assert [r.id for r in duplicates] == ['rec-002']

        duplicates = asyncio.run(records.find_duplicates(
            create_candidate(roll_number='RU23CS045', course='MBA'), exclude_id='rec-001'
        ))
        assert duplicates == []

    def test_aggregate_stats_counts_verified_only(self):
        verified = [
            create_record(id=f'v-{i}', certificate_number=f'V/{i}', cgpa=7.0 + i, percentage=None)
            for i in range(3)
        ]
        pending = create_record(id='p-1', certificate_number='P/1', status=CertificateStatus.PENDING)
        records, _ = create_environment(*verified, pending)

        stats = asyncio.run(records.aggregate_stats('inst-ru', 'B.Sc CS'))

        assert stats.sample_size == 3
        assert stats.mean_cgpa == pytest.approx(8.0)
        assert stats.mean_percentage is None


# ==============================================================================
# DATASET AND SUBMISSIONS
# ==============================================================================

class TestDatasetLoading:

    def test_load_dataset(self, tmp_path):
        dataset = {
            'institutions': [
                {'id': 'inst-ru', 'name': 'Ranchi University', 'isActive': True, 'isVerified': 'true'},
            ],
            'certificates': [{
                'id': 'rec-001',
                'certificateNumber': 'RU/2023/BSC/001',
                'studentName': 'Rahul Kumar Singh',
                'course': 'B.Sc CS',
                'passingYear': '2023',
                'dateOfIssue': '2023-07-15T00:00:00.000Z',
                'institutionId': 'inst-ru',
                'cgpa': '8.2',
                'percentage': '80%',
                'isLegacy': 'false',
                'status': 'verified',
            }],
            'blacklist': [
                {'type': 'student', 'identifier': 'Fake Person', 'reason': 'Fraud case'},
            ],
        }
        path = tmp_path / 'dataset.json'
        path.write_text(json.dumps(dataset))

        records, institutions = load_dataset(path)

        record = asyncio.run(records.find_by_certificate_number('RU/2023/BSC/001'))
        assert record.passing_year == 2023
        assert record.date_of_issue == date(2023, 7, 15)
        assert record.percentage == 80.0
        assert record.status is CertificateStatus.VERIFIED
        assert asyncio.run(institutions.find_by_id('inst-ru')).is_in_good_standing
        entry = asyncio.run(records.find_blacklist_entry(BlacklistType.STUDENT, 'fake  person'))
        assert entry.reason == 'Fraud case'

    def test_load_dataset_rejects_invalid_record(self, tmp_path):
        path = tmp_path / 'dataset.json'
        path.write_text(json.dumps({'certificates': [{
            'id': 'bad',
            'certificateNumber': 'X/1',
            'studentName': 'Someone',
            'course': 'MBA',
            'passingYear': 1900,
            'dateOfIssue': '1900-01-01',
            'institutionId': 'inst-ru',
        }]}))

        with pytest.raises(InputError):
            load_dataset(path)


class TestSubmissions:

    def test_submission_from_ocr(self):
        ocr_result = {
            'text': 'RANCHI UNIVERSITY\nBachelor of Science',
            'confidence': 91.5,
            'extractedFields': {
                'certificateNumber': ' RU/2023/BSC/001 ',
                'studentName': 'Rahul Kumar Singh',
                'passingYear': '2023',
                'dateOfIssue': '15/07/2023',
                'cgpa': '',
            },
        }

        candidate = CandidateSubmission.from_ocr(ocr_result, institution_id='inst-ru')

        assert candidate.certificate_number == 'RU/2023/BSC/001'
        assert candidate.passing_year == 2023
        assert candidate.date_of_issue == date(2023, 7, 15)
        assert candidate.cgpa is None
        assert candidate.institution_id == 'inst-ru'
        assert candidate.ocr_confidence == 91.5
        assert candidate.ocr_text.startswith('RANCHI')

    def test_submission_from_dict_ignores_unknown_keys(self):
        candidate = CandidateSubmission.from_dict({'studentName': 'Rahul', 'photoUrl': 'x.png'})
        assert candidate.student_name == 'Rahul'
        assert candidate.has_identity()
        assert not CandidateSubmission().has_identity()

    def test_record_round_trip_through_dict(self):
        record = create_record(ledger_digest='ab' * 32)
        assert CertificateRecord.from_dict(record.to_dict()) == record

    def test_parsers(self):
        assert parse_date('15.07.2023') == date(2023, 7, 15)
        assert parse_date('July 2023') is None
        assert parse_float(' 80 % ') == 80.0
        assert parse_float('n/a') is None


class TestInMemoryLedger:

    def test_ledger_register_is_idempotent(self):
        ledger = InMemoryLedger()
        record = create_record()

        assert ledger.register(record) == ledger.register(record)
        validation = asyncio.run(ledger.validate(ledger.register(record)))
        assert validation.exists
        assert validation.payload['studentName'] == 'Rahul Kumar Singh'
