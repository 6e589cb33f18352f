# Path: certverify/tests/test_anomaly_detector.py
"""Anomaly detection rules, prioritization and scoring."""

import asyncio
from datetime import date

import pytest

from certverify.engine.checks import AnomalyDetector
from certverify.engine.checks.anomaly_detector import longest_sequential_run, prioritize
from certverify.engine.settings import EngineSettings
from certverify.exceptions import CollaboratorUnavailable
from certverify.models import (
    AnomalyDetails,
    AnomalyType,
    BlacklistEntry,
    BlacklistType,
    CertificateStatus,
    Severity,
)
from certverify.tests.fixtures import (
    TODAY,
    UnavailableRecordRepository,
    create_candidate,
    create_environment,
    create_record,
)


def detector_for(*records, settings=None):
    repo, _ = create_environment(*records, enforce_unique_numbers=False)
    return AnomalyDetector(repo, settings, today=lambda: TODAY)


def types_of(findings):
    return [f.anomaly_type for f in findings]


def detect(candidate, *records, settings=None):
    detector = detector_for(*(records or (create_record(),)), settings=settings)
    return asyncio.run(detector.detect(candidate))


def verified_peers(count, cgpa, percentage):
    return [
        create_record(
            id=f'peer-{i}',
            certificate_number=f'RU/2023/BSC/P{i:02d}',
            student_name=f'Peer Student {chr(65 + i)}',
            roll_number=f'RU23P{i:02d}',
            cgpa=cgpa,
            percentage=percentage,
            status=CertificateStatus.VERIFIED,
        )
        for i in range(count)
    ]


class TestGradeRules:

    def test_clean_candidate_has_no_findings(self):
        detector = detector_for(create_record())
        result = asyncio.run(detector.check(create_candidate()))

        assert result.passed
        assert result.confidence == 100
        assert result.details.findings == ()

    def test_cgpa_above_ten_is_critical_impossible_grade(self):
        for overrides in ({}, {'percentage': None}, {'student_name': 'Anita Sharma'}, {'course': None}):
            findings = detect(create_candidate(cgpa=10.5, **overrides))
            impossible = [f for f in findings if f.anomaly_type is AnomalyType.IMPOSSIBLE_GRADE]

            assert len(impossible) == 1
            assert impossible[0].severity is Severity.CRITICAL
            assert impossible[0].risk_score >= 90

    def test_impossible_grade_scenario_confidence(self):
        detector = detector_for(create_record())
        result = asyncio.run(detector.check(create_candidate(cgpa=12.0)))

        assert not result.passed
        assert types_of(result.details.findings) == [
            AnomalyType.IMPOSSIBLE_GRADE,
            AnomalyType.GRADE_INCONSISTENCY,
        ]
        assert result.details.findings[1].severity is Severity.HIGH
        assert result.details.total_deduction == 50
        assert result.confidence == 50

    def test_grade_inconsistency_medium_band(self):
        # expected 8.0 * 9.5 = 76.0, deviation 22
        findings = detect(create_candidate(cgpa=8.0, percentage=98.0))
        assert types_of(findings) == [AnomalyType.GRADE_INCONSISTENCY]
        assert findings[0].severity is Severity.MEDIUM

    def test_conversion_factor_is_configurable(self):
        settings = EngineSettings(cgpa_percentage_factor=10.0)
        findings = detect(create_candidate(cgpa=8.0, percentage=98.0), settings=settings)
        assert findings == []

    def test_suspicious_grade_pattern(self):
        findings = detect(create_candidate(grade='A+++'))
        assert types_of(findings) == [AnomalyType.SUSPICIOUS_GRADE_PATTERN]


class TestIdentityRules:

    def test_sequential_certificate_numbers(self):
        cases = {
            'CERT/111111': Severity.HIGH,
            'CERT/123456': Severity.HIGH,
            'CERT/2024/789': Severity.MEDIUM,
            'CERT/9876': Severity.MEDIUM,
            'RU/2023/BSC/401': None,
        }
        for number, severity in cases.items():
            findings = detect(create_candidate(certificate_number=number))
            sequential = [f for f in findings if f.anomaly_type is AnomalyType.SEQUENTIAL_CERTIFICATE_NUMBER]
            if severity is None:
                assert sequential == [], number
                continue
            assert len(sequential) == 1, number
            assert sequential[0].severity is severity, number

    def test_runs_do_not_cross_separators(self):
        findings = detect(create_candidate(certificate_number='RU/12/345'))
        sequential = [f for f in findings if f.anomaly_type is AnomalyType.SEQUENTIAL_CERTIFICATE_NUMBER]
        assert sequential[0].description == 'Certificate number contains 3 sequential digits'

    def test_longest_sequential_run(self):
        assert longest_sequential_run('9123459') == 5
        assert longest_sequential_run('7654') == 4
        assert longest_sequential_run('1357') == 1
        assert longest_sequential_run('1210') == 3
        assert longest_sequential_run('') == 0

    def test_placeholder_and_invalid_names(self):
        findings = detect(create_candidate(student_name='Test Student'))
        assert AnomalyType.SUSPICIOUS_NAME in types_of(findings)

        findings = detect(create_candidate(student_name='R4hul @Singh'))
        assert types_of(findings).count(AnomalyType.INVALID_CHARACTERS) == 1

        findings = detect(create_candidate(student_name="Mary-Jane O'Neil"))
        assert findings == []

    def test_missing_critical_fields(self):
        findings = detect(create_candidate(course=None, passing_year=None))
        missing = [f for f in findings if f.anomaly_type is AnomalyType.MISSING_CRITICAL_FIELDS]
        assert len(missing) == 1
        assert 'course' in missing[0].description
        assert 'passing_year' in missing[0].description


class TestTemporalAndDocumentRules:

    def test_temporal_rules(self):
        findings = detect(create_candidate(passing_year=2030, date_of_issue=date(2025, 1, 1)))
        assert set(types_of(findings)) >= {
            AnomalyType.FUTURE_PASSING_YEAR,
            AnomalyType.FUTURE_ISSUE_DATE,
        }

        findings = detect(create_candidate(
            date_of_issue=date(2023, 7, 15),
            date_of_completion=date(2023, 8, 1),
        ))
        assert types_of(findings) == [AnomalyType.COMPLETION_AFTER_ISSUE]

        findings = detect(create_candidate(passing_year=1942))
        assert types_of(findings) == [AnomalyType.IMPLAUSIBLE_PASSING_YEAR]

    def test_forgery_indicators_and_low_ocr_confidence(self):
        candidate = create_candidate(
            ocr_text='RANCHI UNIVERSITY ... PHOTOCOPY - NOT ORIGINAL',
            ocr_confidence=42.0,
        )
        findings = detect(candidate)

        assert types_of(findings).count(AnomalyType.FORGERY_INDICATOR) == 2
        assert AnomalyType.LOW_OCR_CONFIDENCE in types_of(findings)


class TestStatisticalRules:

    def test_statistical_outlier_requires_sample_size(self):
        candidate = create_candidate(
            certificate_number='RU/2023/BSC/900',
            cgpa=9.8,
            percentage=93.0,
            institution_id='inst-ru',
        )

        findings = detect(candidate, *verified_peers(9, 6.5, 62.0))
        assert findings == []

        findings = detect(candidate, *verified_peers(10, 6.5, 62.0))
        assert set(types_of(findings)) == {
            AnomalyType.STATISTICAL_OUTLIER_CGPA,
            AnomalyType.STATISTICAL_OUTLIER_PERCENTAGE,
        }
        assert all(f.detection_method == 'STATISTICAL' for f in findings)

    def test_only_verified_records_count_toward_aggregates(self):
        peers = [
            create_record(
                id=f'pending-{i}',
                certificate_number=f'RU/2023/BSC/Q{i:02d}',
                student_name=f'Pending Student {chr(65 + i)}',
                roll_number=f'RU23Q{i:02d}',
                cgpa=6.5,
                percentage=62.0,
                status=CertificateStatus.PENDING,
            )
            for i in range(12)
        ]
        candidate = create_candidate(certificate_number='RU/2023/BSC/900', cgpa=9.8, percentage=93.0,
                                     institution_id='inst-ru')
        assert detect(candidate, *peers) == []


class TestCrossReference:

    def test_duplicate_records_are_critical(self):
        original = create_record()
        copy = create_record(id='rec-002', roll_number='RU23CS046')

        findings = detect(create_candidate(), original, copy)

        duplicates = [f for f in findings if f.anomaly_type is AnomalyType.DUPLICATE_CERTIFICATE]
        assert len(duplicates) == 1
        assert duplicates[0].severity is Severity.CRITICAL

    def test_record_found_by_identity_is_not_its_own_duplicate(self):
        candidate = create_candidate(certificate_number=None, roll_number='RU23CS045', institution_id='inst-ru')
        assert detect(candidate) == []

    def test_blacklisted_student(self):
        repo, _ = create_environment(create_record())
        repo.add_blacklist_entry(BlacklistEntry(BlacklistType.STUDENT, 'rahul kumar singh', 'Fraud case 2022'))
        detector = AnomalyDetector(repo, today=lambda: TODAY)

        findings = asyncio.run(detector.detect(create_candidate()))

        assert types_of(findings) == [AnomalyType.BLACKLISTED_ENTITY]
        assert 'Fraud case 2022' in findings[0].description

    def test_inactive_blacklist_entry_is_ignored(self):
        repo, _ = create_environment(create_record())
        repo.add_blacklist_entry(BlacklistEntry(BlacklistType.CERTIFICATE, 'RU/2023/BSC/001', is_active=False))
        detector = AnomalyDetector(repo, today=lambda: TODAY)

        assert asyncio.run(detector.detect(create_candidate())) == []

    def test_repository_errors_propagate(self):
        detector = AnomalyDetector(UnavailableRecordRepository(), today=lambda: TODAY)
        with pytest.raises(CollaboratorUnavailable):
            asyncio.run(detector.detect(create_candidate()))


class TestPrioritization:

    def test_findings_ordered_by_risk_with_priorities(self):
        candidate = create_candidate(
            student_name='Test Student',
            cgpa=11.0,
            passing_year=2030,
            ocr_confidence=30.0,
        )
        findings = detect(candidate)

        risks = [f.risk_score for f in findings]
        assert risks == sorted(risks, reverse=True)
        assert [f.priority for f in findings] == list(range(1, len(findings) + 1))
        assert findings[0].anomaly_type is AnomalyType.FUTURE_PASSING_YEAR

    def test_prioritize_is_stable_for_equal_risk(self):
        detector = detector_for(create_record())
        findings = detector.detect_document_anomalies(
            create_candidate(ocr_text='photocopy duplicate')
        )
        ordered = prioritize(findings)
        assert [f.description for f in ordered] == [f.description for f in findings]
        assert [f.priority for f in ordered] == [1, 2]

    def test_confidence_never_negative(self):
        candidate = create_candidate(
            student_name='Test 123',
            cgpa=11.0,
            percentage=40.0,
            grade='OOOO',
            passing_year=2030,
            certificate_number='111111',
            ocr_text='photocopy duplicate not original reproduction',
            ocr_confidence=10.0,
        )
        detector = detector_for(create_record())
        result = asyncio.run(detector.check(candidate))

        assert result.confidence == 0
        assert isinstance(result.details, AnomalyDetails)
        assert result.details.total_deduction > 100
