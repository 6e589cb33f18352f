# Path: certverify/engine/checks/duplicate_check.py
"""
Duplicate Check

Other stored records sharing the certificate number, or sharing
student name + roll number + course + passing year. The record the
submission represents is excluded. Passes only when none exist.
"""

from ...constants import CHECK_DUPLICATE
from ...models import CandidateSubmission, CheckResult, DuplicateDetails
from ..constants import CONFIDENCE_MAX, CONFIDENCE_MIN
from ..tools.lookup import find_stored_record, own_record_id


class DuplicateCheck:

    def __init__(self, records):
        self.records = records

    async def check(self, candidate: CandidateSubmission) -> CheckResult:
        stored = await find_stored_record(candidate, self.records)
        exclude_id = own_record_id(candidate, stored)

        duplicates = await self.records.find_duplicates(candidate, exclude_id, include_course=True)
        details = DuplicateDetails(
            duplicate_ids=tuple(r.id for r in duplicates),
            excluded_id=exclude_id,
        )

        if duplicates:
            return CheckResult(
                check_name=CHECK_DUPLICATE,
                passed=False,
                confidence=CONFIDENCE_MIN,
                message=f"Found {len(duplicates)} duplicate certificate(s)",
                details=details,
            )

        return CheckResult(
            check_name=CHECK_DUPLICATE,
            passed=True,
            confidence=CONFIDENCE_MAX,
            message='No duplicates found',
            details=details,
        )


__all__ = ['DuplicateCheck']
