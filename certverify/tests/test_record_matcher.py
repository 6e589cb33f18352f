# Path: certverify/tests/test_record_matcher.py
"""Record matcher lookup and scoring."""

import asyncio
from datetime import date

from certverify.engine.checks import RecordMatcher
from certverify.engine.checks.record_matcher import score_issue_date
from certverify.engine.settings import EngineSettings
from certverify.engine.tools import find_stored_record, locate_record
from certverify.models import MatchMethod, RecordMatchDetails
from certverify.tests.fixtures import create_candidate, create_environment, create_record


class TestMatching:

    def test_exact_match_scores_100(self):
        records, _ = create_environment(create_record())
        matcher = RecordMatcher(records)

        result = asyncio.run(matcher.check(create_candidate()))

        assert result.passed
        assert result.confidence == 100
        assert isinstance(result.details, RecordMatchDetails)
        assert result.details.matched_by is MatchMethod.CERTIFICATE_NUMBER
        assert result.details.record_id == 'rec-001'

    def test_only_shared_fields_are_weighted(self):
        records, _ = create_environment(create_record())
        matcher = RecordMatcher(records)

        # cgpa differs; name, number, course, year, percentage agree (75 of 80 weight)
        match = asyncio.run(matcher.match(create_candidate(cgpa=12.0)))

        assert match.score == 94
        assert match.field_scores['cgpa'] == 0.0
        assert 'roll_number' not in match.field_scores

    def test_fuzzy_name_match(self):
        records, _ = create_environment(create_record())
        matcher = RecordMatcher(records)

        match = asyncio.run(matcher.match(create_candidate(student_name='Rahul Kumar Sinh')))

        assert 0.9 < match.field_scores['student_name'] < 1.0
        assert match.score >= EngineSettings().match_threshold

    def test_fallback_lookup_by_name_and_roll(self):
        records, _ = create_environment(create_record())
        matcher = RecordMatcher(records)
        candidate = create_candidate(certificate_number='RU/2023/BSC/999', roll_number='RU23CS045')

        match = asyncio.run(matcher.match(candidate))

        assert match is not None
        assert match.matched_by is MatchMethod.NAME_ROLL_INSTITUTION
        assert match.field_scores['certificate_number'] == 0.0
        assert match.score < 100

    def test_every_check_shares_the_fallback_lookup(self):
        records, _ = create_environment(create_record())
        candidate = create_candidate(certificate_number=None, roll_number='RU23CS045')

        record, method = asyncio.run(locate_record(candidate, records))

        assert record.id == 'rec-001'
        assert method is MatchMethod.NAME_ROLL_INSTITUTION
        assert asyncio.run(find_stored_record(candidate, records)) == record
        assert asyncio.run(RecordMatcher(records).match(candidate)).record == record

        anonymous = create_candidate(certificate_number=None, student_name=None)
        assert asyncio.run(find_stored_record(anonymous, records)) is None

    def test_no_record_found_is_zero_confidence(self):
        records, _ = create_environment(create_record())
        matcher = RecordMatcher(records)
        candidate = create_candidate(certificate_number='XX/1/9', student_name='Anita Sharma')

        result = asyncio.run(matcher.check(candidate))

        assert not result.passed
        assert result.confidence == 0
        assert result.details is None
        assert result.message == 'Certificate not found in records'

    def test_low_score_fails_but_keeps_confidence(self):
        records, _ = create_environment(create_record())
        matcher = RecordMatcher(records)
        candidate = create_candidate(
            student_name='Someone Different',
            course='MBA',
            passing_year=2019,
        )

        result = asyncio.run(matcher.check(candidate))

        assert not result.passed
        assert 0 < result.confidence < 80
        assert result.message == 'Certificate details mismatch'


class TestScoring:

    def test_issue_date_scoring(self):
        issued = date(2023, 7, 15)
        assert score_issue_date(issued, date(2023, 7, 15)) == 1.0
        assert score_issue_date(issued, date(2023, 7, 22)) == 0.8
        assert score_issue_date(issued, date(2023, 7, 8)) == 0.8
        assert score_issue_date(issued, date(2023, 7, 23)) == 0.0

    def test_match_threshold_is_configurable(self):
        records, _ = create_environment(create_record())
        matcher = RecordMatcher(records, EngineSettings(match_threshold=95))

        result = asyncio.run(matcher.check(create_candidate(cgpa=12.0)))

        assert result.confidence == 94
        assert not result.passed
