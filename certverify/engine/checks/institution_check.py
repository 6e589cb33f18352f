# Path: certverify/engine/checks/institution_check.py
"""
Institution Status Check

Boolean gate on the issuing institution:
- absent (or no institution reference): fail at 0
- present but not active and verified: fail at 20
- otherwise: pass at 100
"""

from typing import Optional

from ...constants import CHECK_INSTITUTION, LOG_PROCESS
from ...core.logger import get_process_logger
from ...models import CandidateSubmission, CheckResult, InstitutionDetails
from ..constants import (
    CONFIDENCE_MAX,
    CONFIDENCE_MIN,
    INSTITUTION_NOT_IN_GOOD_STANDING_CONFIDENCE,
)
from ..tools.lookup import find_stored_record


class InstitutionCheck:
    """Checks that the issuing institution exists and is in good standing."""

    def __init__(self, institutions, records):
        """
        Args:
            institutions: InstitutionRepository
            records: RecordRepository (institution fallback from the stored record)
        """
        self.institutions = institutions
        self.records = records
        self.logger = get_process_logger('institution_check')

    async def check(self, candidate: CandidateSubmission) -> CheckResult:
        institution_id = candidate.institution_id
        if not institution_id:
            stored = await find_stored_record(candidate, self.records)
            institution_id = stored.institution_id if stored is not None else None

        return await self.check_institution(institution_id)

    async def check_institution(self, institution_id: Optional[str]) -> CheckResult:
        if not institution_id:
            return CheckResult(
                check_name=CHECK_INSTITUTION,
                passed=False,
                confidence=CONFIDENCE_MIN,
                message='No issuing institution given',
                details=InstitutionDetails(),
            )

        institution = await self.institutions.find_by_id(institution_id)
        if institution is None:
            self.logger.info(f"{LOG_PROCESS} Institution {institution_id} not found")
            return CheckResult(
                check_name=CHECK_INSTITUTION,
                passed=False,
                confidence=CONFIDENCE_MIN,
                message='Institution not found',
                details=InstitutionDetails(institution_id=institution_id),
            )

        details = InstitutionDetails(
            institution_id=institution.id,
            name=institution.name,
            is_active=institution.is_active,
            is_verified=institution.is_verified,
        )

        if not institution.is_in_good_standing:
            return CheckResult(
                check_name=CHECK_INSTITUTION,
                passed=False,
                confidence=INSTITUTION_NOT_IN_GOOD_STANDING_CONFIDENCE,
                message='Institution is not active or verified',
                details=details,
            )

        return CheckResult(
            check_name=CHECK_INSTITUTION,
            passed=True,
            confidence=CONFIDENCE_MAX,
            message='Institution validated',
            details=details,
        )


__all__ = ['InstitutionCheck']
