# Path: certverify/engine/checks/record_matcher.py
"""
Record Matcher

Finds the stored record a submission claims to be and scores how well
the submitted fields agree with it.

Lookup is shared with the other checks (tools.lookup.locate_record):
exact certificate number first, then student name + roll number +
course + passing year + institution.

Score:
    sum(weight * field_score) / sum(weight of fields present on both sides) * 100

Name and course are compared with similarity(); the issue date scores
1.0 on the same day, 0.8 within a week; everything else is exact.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ...constants import CHECK_RECORD_MATCH, LOG_PROCESS
from ...core.logger import get_process_logger
from ...models import (
    CandidateSubmission,
    CertificateRecord,
    CheckResult,
    MatchMethod,
    RecordMatchDetails,
)
from ..constants import (
    FUZZY_MATCH_FIELDS,
    FIELD_DATE_OF_ISSUE,
    DATE_EXACT_SCORE,
    DATE_NEAR_SCORE,
    DATE_NEAR_DAYS,
    CONFIDENCE_MIN,
)
from ..settings import EngineSettings
from ..tools.rounding import round_half_up
from ..tools.lookup import locate_record
from ..tools.similarity import normalize_text, similarity


@dataclass(frozen=True)
class RecordMatch:
    """
    A located record and its match score.

    Attributes:
        record: Stored record
        score: Weighted match score 0-100
        matched_by: Lookup path that found the record
        field_scores: Per-field score 0-1 (fields present on both sides only)
    """
    record: CertificateRecord
    score: int
    matched_by: MatchMethod
    field_scores: dict


def _present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def score_issue_date(left: date, right: date) -> float:
    days = abs((left - right).days)
    if days == 0:
        return DATE_EXACT_SCORE
    if days <= DATE_NEAR_DAYS:
        return DATE_NEAR_SCORE
    return 0.0


def score_field(field_name: str, left, right) -> float:
    """Score one field pair in [0, 1]."""
    if field_name in FUZZY_MATCH_FIELDS:
        return similarity(normalize_text(left), normalize_text(right))
    if field_name == FIELD_DATE_OF_ISSUE:
        return score_issue_date(left, right)
    if isinstance(left, str) and isinstance(right, str):
        return 1.0 if left.strip() == right.strip() else 0.0
    return 1.0 if left == right else 0.0


class RecordMatcher:
    """
    Locates and scores the stored record for a submission.

    Example:
        matcher = RecordMatcher(records)
        match = await matcher.match(candidate)
        if match and match.score >= settings.match_threshold:
            ...
    """

    def __init__(self, records, settings: Optional[EngineSettings] = None):
        """
        Args:
            records: RecordRepository
            settings: Engine settings (field weights, match threshold)
        """
        self.records = records
        self.settings = settings or EngineSettings()
        self.logger = get_process_logger('record_matcher')

    async def match(
        self,
        candidate: CandidateSubmission,
        institution_id: Optional[str] = None,
    ) -> Optional[RecordMatch]:
        """
        Locate the stored record and score it.

        Args:
            candidate: Submission to match
            institution_id: Restrict the fallback lookup to this institution
                (defaults to the candidate's institution)

        Returns:
            RecordMatch, or None when no stored record was found
        """
        record, matched_by = await locate_record(candidate, self.records, institution_id)
        if record is None:
            return None

        score, field_scores = self.score(candidate, record)
        return RecordMatch(
            record=record,
            score=score,
            matched_by=matched_by,
            field_scores=field_scores,
        )

    def score(
        self,
        candidate: CandidateSubmission,
        record: CertificateRecord,
    ) -> tuple[int, dict]:
        """
        Weighted field-by-field match score.

        Returns:
            (score 0-100, {field: field_score}) - score is 0 when no
            weighted field is present on both sides
        """
        weighted = 0.0
        total_weight = 0
        field_scores = {}

        for field_name, weight in self.settings.field_weights.items():
            left = getattr(candidate, field_name, None)
            right = getattr(record, field_name, None)
            if not (_present(left) and _present(right)):
                continue

            field_score = score_field(field_name, left, right)
            field_scores[field_name] = round(field_score, 4)
            weighted += weight * field_score
            total_weight += weight

        if total_weight == 0:
            return CONFIDENCE_MIN, field_scores

        return round_half_up(weighted / total_weight * 100), field_scores

    async def check(self, candidate: CandidateSubmission) -> CheckResult:
        """
        Run the record match check.

        Returns:
            CheckResult: confidence 0 when no record exists; otherwise the
            match score, passing at or above the match threshold
        """
        match = await self.match(candidate)

        if match is None:
            self.logger.info(f"{LOG_PROCESS} No stored record for submission")
            return CheckResult(
                check_name=CHECK_RECORD_MATCH,
                passed=False,
                confidence=CONFIDENCE_MIN,
                message='Certificate not found in records',
            )

        passed = match.score >= self.settings.match_threshold
        self.logger.info(
            f"{LOG_PROCESS} Matched record {match.record.id} by "
            f"{match.matched_by.value} with score {match.score}"
        )

        return CheckResult(
            check_name=CHECK_RECORD_MATCH,
            passed=passed,
            confidence=match.score,
            message='Certificate found and verified' if passed else 'Certificate details mismatch',
            details=RecordMatchDetails(
                record_id=match.record.id,
                matched_by=match.matched_by,
                field_scores=match.field_scores,
                score=match.score,
            ),
        )


__all__ = ['RecordMatcher', 'RecordMatch', 'score_field', 'score_issue_date']
