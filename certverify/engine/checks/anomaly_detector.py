# Path: certverify/engine/checks/anomaly_detector.py
"""
Anomaly Detector

Battery of independent forgery rules run over a submission. Each rule
returns zero or more AnomalyFindings; the detector collects them, orders
them by risk (highest first, rank 1) and folds them into one CheckResult:

    confidence = max(0, 100 - sum(severity deduction per finding))

Rule groups:
- Grades: impossible values, CGPA/percentage inconsistency, suspicious patterns
- Identity: sequential certificate numbers, placeholder names, invalid
  name characters, missing critical fields
- Temporal: future passing year / issue date, completion after issue,
  implausibly old passing year
- Document: forgery wording in OCR text, low OCR confidence
- Statistical: CGPA / percentage far from the institution + course mean
- Cross-reference: duplicate records, blacklisted certificate or student

Repository errors are not swallowed; they propagate and the
orchestrator records the whole check as failed.
"""

import re
from dataclasses import replace
from datetime import date
from typing import Callable, Optional

from ...constants import CHECK_ANOMALY_DETECTION, LOG_PROCESS, MIN_PASSING_YEAR, MAX_CGPA, MAX_PERCENTAGE
from ...core.logger import get_process_logger
from ...models import (
    AnomalyDetails,
    AnomalyFinding,
    AnomalyType,
    BlacklistType,
    CandidateSubmission,
    CertificateRecord,
    CheckResult,
    Severity,
)
from ..constants import (
    RISK_SCORES,
    FINDING_CONFIDENCE,
    SUSPICIOUS_GRADE_PATTERN,
    SEQUENTIAL_RUN_LENGTH,
    SEQUENTIAL_HIGH_RUN_LENGTH,
    REPEATED_DIGIT_MIN_LENGTH,
    PLACEHOLDER_NAME_PATTERN,
    INVALID_NAME_CHARACTERS,
    CRITICAL_FIELDS,
    FORGERY_INDICATORS,
    CONFIDENCE_MAX,
    CONFIDENCE_MIN,
)
from ..settings import EngineSettings
from ..tools.lookup import find_stored_record, own_record_id

DETECTION_RULE = 'RULE'
DETECTION_STATISTICAL = 'STATISTICAL'

_DIGIT_GROUPS = re.compile(r'\d+')


def make_finding(
    anomaly_type: AnomalyType,
    severity: Severity,
    description: str,
    detection_method: str = DETECTION_RULE,
) -> AnomalyFinding:
    """Build a finding with the configured risk score and confidence for its type."""
    return AnomalyFinding(
        anomaly_type=anomaly_type,
        severity=severity,
        confidence=FINDING_CONFIDENCE[anomaly_type],
        description=description,
        risk_score=RISK_SCORES[(anomaly_type, severity)],
        detection_method=detection_method,
    )


def longest_sequential_run(digits: str) -> int:
    """
    Length of the longest run of consecutive ascending or descending digits.

    '9123459' -> 5 (12345), '7654' -> 4, '1357' -> 1
    """
    if not digits:
        return 0

    longest = 1
    run = 1
    step = 0
    for previous, current in zip(digits, digits[1:]):
        diff = int(current) - int(previous)
        if diff in (1, -1) and (run == 1 or diff == step):
            run += 1
        elif diff in (1, -1):
            run = 2
        else:
            run = 1
        step = diff
        longest = max(longest, run)
    return longest


def prioritize(findings: list[AnomalyFinding]) -> list[AnomalyFinding]:
    """Sort by risk score descending (stable) and assign priority ranks from 1."""
    ordered = sorted(findings, key=lambda f: f.risk_score, reverse=True)
    return [replace(f, priority=rank) for rank, f in enumerate(ordered, start=1)]


class AnomalyDetector:
    """
    Rule-based and statistical anomaly detection.

    Example:
        detector = AnomalyDetector(records, settings)
        findings = await detector.detect(candidate)
        result = await detector.check(candidate)
    """

    def __init__(
        self,
        records,
        settings: Optional[EngineSettings] = None,
        today: Callable[[], date] = date.today,
    ):
        """
        Args:
            records: RecordRepository (aggregates, duplicates, blacklist)
            settings: Engine settings
            today: Clock used by the temporal rules
        """
        self.records = records
        self.settings = settings or EngineSettings()
        self.today = today
        self.logger = get_process_logger('anomaly_detector')

    # ==========================================================================
    # ENTRY POINTS
    # ==========================================================================

    async def detect(self, candidate: CandidateSubmission) -> list[AnomalyFinding]:
        """
        Run every rule and return the prioritized findings.

        Raises:
            CollaboratorUnavailable: If the repository cannot be reached
        """
        stored = await find_stored_record(candidate, self.records)

        findings = []
        findings.extend(self.detect_grade_anomalies(candidate))
        findings.extend(self.detect_identity_anomalies(candidate))
        findings.extend(self.detect_temporal_anomalies(candidate))
        findings.extend(self.detect_document_anomalies(candidate))
        findings.extend(await self.detect_statistical_outliers(candidate, stored))
        findings.extend(await self.cross_reference(candidate, stored))

        return prioritize(findings)

    async def check(self, candidate: CandidateSubmission) -> CheckResult:
        """Fold the findings into the anomaly detection CheckResult."""
        findings = await self.detect(candidate)

        total_deduction = sum(
            self.settings.severity_deductions[f.severity] for f in findings
        )
        confidence = max(CONFIDENCE_MIN, CONFIDENCE_MAX - total_deduction)

        if findings:
            message = (
                f"{len(findings)} anomaly(ies) detected "
                f"(highest risk: {findings[0].anomaly_type.value})"
            )
            self.logger.info(f"{LOG_PROCESS} {message}")
        else:
            message = 'No anomalies detected'

        return CheckResult(
            check_name=CHECK_ANOMALY_DETECTION,
            passed=not findings,
            confidence=confidence,
            message=message,
            details=AnomalyDetails(findings=tuple(findings), total_deduction=total_deduction),
        )

    # ==========================================================================
    # GRADE RULES
    # ==========================================================================

    def detect_grade_anomalies(self, candidate: CandidateSubmission) -> list[AnomalyFinding]:
        findings = []
        cgpa = candidate.cgpa
        percentage = candidate.percentage

        if (cgpa is not None and cgpa > MAX_CGPA) or (
            percentage is not None and percentage > MAX_PERCENTAGE
        ):
            findings.append(make_finding(
                AnomalyType.IMPOSSIBLE_GRADE,
                Severity.CRITICAL,
                f"Grade exceeds maximum possible value: CGPA {cgpa}, Percentage {percentage}%",
            ))

        if cgpa is not None and percentage is not None:
            expected = cgpa * self.settings.cgpa_percentage_factor
            deviation = abs(percentage - expected)
            severity = None
            if deviation > self.settings.grade_high_deviation:
                severity = Severity.HIGH
            elif deviation > self.settings.grade_medium_deviation:
                severity = Severity.MEDIUM

            if severity is not None:
                findings.append(make_finding(
                    AnomalyType.GRADE_INCONSISTENCY,
                    severity,
                    f"CGPA ({cgpa}) and percentage ({percentage}%) are inconsistent "
                    f"(expected about {expected:.1f}%)",
                ))

        if candidate.grade and SUSPICIOUS_GRADE_PATTERN.search(candidate.grade):
            findings.append(make_finding(
                AnomalyType.SUSPICIOUS_GRADE_PATTERN,
                Severity.MEDIUM,
                f"Grade contains suspicious pattern: {candidate.grade}",
            ))

        return findings

    # ==========================================================================
    # IDENTITY RULES
    # ==========================================================================

    def detect_identity_anomalies(self, candidate: CandidateSubmission) -> list[AnomalyFinding]:
        findings = []

        number_finding = self._check_certificate_number(candidate.certificate_number or '')
        if number_finding is not None:
            findings.append(number_finding)

        name = candidate.student_name or ''
        if name and PLACEHOLDER_NAME_PATTERN.search(name):
            findings.append(make_finding(
                AnomalyType.SUSPICIOUS_NAME,
                Severity.HIGH,
                'Student name appears to be fake or test data',
            ))
        if name and INVALID_NAME_CHARACTERS.search(name):
            findings.append(make_finding(
                AnomalyType.INVALID_CHARACTERS,
                Severity.MEDIUM,
                'Name contains invalid or suspicious characters',
            ))

        missing = [f for f in CRITICAL_FIELDS if not getattr(candidate, f)]
        if missing:
            findings.append(make_finding(
                AnomalyType.MISSING_CRITICAL_FIELDS,
                Severity.HIGH,
                f"Missing critical fields: {', '.join(missing)}",
            ))

        return findings

    def _check_certificate_number(self, number: str) -> Optional[AnomalyFinding]:
        groups = _DIGIT_GROUPS.findall(number)
        digits = ''.join(groups)

        if len(digits) >= REPEATED_DIGIT_MIN_LENGTH and len(set(digits)) == 1:
            return make_finding(
                AnomalyType.SEQUENTIAL_CERTIFICATE_NUMBER,
                Severity.HIGH,
                f"Certificate number consists of one repeated digit ({digits})",
            )

        # runs never cross a separator: '2023/401' is not 3-4
        run = max((longest_sequential_run(group) for group in groups), default=0)
        if run < SEQUENTIAL_RUN_LENGTH:
            return None

        severity = Severity.HIGH if run >= SEQUENTIAL_HIGH_RUN_LENGTH else Severity.MEDIUM
        return make_finding(
            AnomalyType.SEQUENTIAL_CERTIFICATE_NUMBER,
            severity,
            f"Certificate number contains {run} sequential digits",
        )

    # ==========================================================================
    # TEMPORAL RULES
    # ==========================================================================

    def detect_temporal_anomalies(self, candidate: CandidateSubmission) -> list[AnomalyFinding]:
        findings = []
        today = self.today()
        year = candidate.passing_year

        if year is not None and year > today.year:
            findings.append(make_finding(
                AnomalyType.FUTURE_PASSING_YEAR,
                Severity.CRITICAL,
                f"Passing year {year} is in the future",
            ))
        elif year is not None and year < MIN_PASSING_YEAR:
            findings.append(make_finding(
                AnomalyType.IMPLAUSIBLE_PASSING_YEAR,
                Severity.MEDIUM,
                f"Passing year {year} is before {MIN_PASSING_YEAR}",
            ))

        issued = candidate.date_of_issue
        if issued is not None and issued > today:
            findings.append(make_finding(
                AnomalyType.FUTURE_ISSUE_DATE,
                Severity.CRITICAL,
                f"Issue date {issued.isoformat()} is in the future",
            ))

        completed = candidate.date_of_completion
        if issued is not None and completed is not None and completed > issued:
            findings.append(make_finding(
                AnomalyType.COMPLETION_AFTER_ISSUE,
                Severity.MEDIUM,
                f"Completion date {completed.isoformat()} is after issue date {issued.isoformat()}",
            ))

        return findings

    # ==========================================================================
    # DOCUMENT RULES
    # ==========================================================================

    def detect_document_anomalies(self, candidate: CandidateSubmission) -> list[AnomalyFinding]:
        findings = []
        text = (candidate.ocr_text or '').lower()

        for indicator in FORGERY_INDICATORS:
            if indicator in text:
                findings.append(make_finding(
                    AnomalyType.FORGERY_INDICATOR,
                    Severity.HIGH,
                    f'Document contains forgery indicator: "{indicator}"',
                ))

        confidence = candidate.ocr_confidence
        if confidence is not None and confidence < self.settings.low_ocr_confidence:
            findings.append(make_finding(
                AnomalyType.LOW_OCR_CONFIDENCE,
                Severity.MEDIUM,
                f"OCR confidence {confidence:g}% is below {self.settings.low_ocr_confidence:g}%",
            ))

        return findings

    # ==========================================================================
    # STATISTICAL RULES
    # ==========================================================================

    async def detect_statistical_outliers(
        self,
        candidate: CandidateSubmission,
        stored: Optional[CertificateRecord],
    ) -> list[AnomalyFinding]:
        """
        Compare grades with the institution + course mean of VERIFIED records.

        Skipped when the aggregate holds fewer than min_sample_size records.
        """
        if candidate.cgpa is None and candidate.percentage is None:
            return []

        institution_id = candidate.institution_id or (stored.institution_id if stored else None)
        course = candidate.course or (stored.course if stored else None)
        if not institution_id or not course:
            return []

        stats = await self.records.aggregate_stats(institution_id, course)
        if stats.sample_size < self.settings.min_sample_size:
            self.logger.debug(
                f"{LOG_PROCESS} Statistical check skipped: sample size {stats.sample_size}"
            )
            return []

        findings = []
        if candidate.cgpa is not None and stats.mean_cgpa is not None:
            if abs(candidate.cgpa - stats.mean_cgpa) > self.settings.cgpa_outlier_deviation:
                findings.append(make_finding(
                    AnomalyType.STATISTICAL_OUTLIER_CGPA,
                    Severity.MEDIUM,
                    f"CGPA significantly deviates from institutional average ({stats.mean_cgpa:.2f})",
                    detection_method=DETECTION_STATISTICAL,
                ))

        if candidate.percentage is not None and stats.mean_percentage is not None:
            deviation = abs(candidate.percentage - stats.mean_percentage)
            if deviation > self.settings.percentage_outlier_deviation:
                findings.append(make_finding(
                    AnomalyType.STATISTICAL_OUTLIER_PERCENTAGE,
                    Severity.MEDIUM,
                    f"Percentage significantly deviates from institutional average "
                    f"({stats.mean_percentage:.2f})",
                    detection_method=DETECTION_STATISTICAL,
                ))

        return findings

    # ==========================================================================
    # CROSS-REFERENCE RULES
    # ==========================================================================

    async def cross_reference(
        self,
        candidate: CandidateSubmission,
        stored: Optional[CertificateRecord],
    ) -> list[AnomalyFinding]:
        """Duplicate records (number, or name + roll + year) and blacklist membership."""
        findings = []

        duplicates = await self.records.find_duplicates(
            candidate,
            own_record_id(candidate, stored),
            include_course=False,
        )
        if duplicates:
            findings.append(make_finding(
                AnomalyType.DUPLICATE_CERTIFICATE,
                Severity.CRITICAL,
                f"Found {len(duplicates)} potential duplicate certificate(s)",
            ))

        entry = None
        if candidate.certificate_number:
            entry = await self.records.find_blacklist_entry(
                BlacklistType.CERTIFICATE, candidate.certificate_number
            )
        if entry is None and candidate.student_name:
            entry = await self.records.find_blacklist_entry(
                BlacklistType.STUDENT, candidate.student_name
            )
        if entry is not None:
            findings.append(make_finding(
                AnomalyType.BLACKLISTED_ENTITY,
                Severity.CRITICAL,
                f"Certificate or student is blacklisted: {entry.reason or entry.identifier}",
            ))

        return findings


__all__ = [
    'AnomalyDetector',
    'make_finding',
    'longest_sequential_run',
    'prioritize',
    'DETECTION_RULE',
    'DETECTION_STATISTICAL',
]
