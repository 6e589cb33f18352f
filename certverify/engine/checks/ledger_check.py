# Path: certverify/engine/checks/ledger_check.py
"""
Ledger Check

Validates a certificate's digest against the tamper-evidence ledger.

Outcomes:
- Legacy, no stored digest: digest computed locally, pass at 60
- Non-legacy, no stored digest: fail at 0 (digest is mandatory)
- Stored digest, ledger confirms and payload agrees: pass at 100
- Stored digest, ledger unknown digest or payload disagrees: fail at 0
  (treated as tampering evidence)
- No ledger configured: fail at 0, same as an unreachable ledger
"""

from typing import Optional

from ...constants import CHECK_LEDGER, LOG_PROCESS
from ...core.logger import get_process_logger
from ...exceptions import InconsistentData
from ...models import CandidateSubmission, CertificateRecord, CheckResult, LedgerDetails
from ..constants import (
    CONFIDENCE_MIN,
    LEDGER_CONFIRMED_CONFIDENCE,
    LEGACY_CERTIFICATE_CONFIDENCE,
)
from ..tools.digest import compute_digest
from ..tools.lookup import find_stored_record

# Ledger payload key -> record attribute compared on confirmation
LEDGER_PAYLOAD_FIELDS = (
    ('studentName', 'student_name'),
    ('course', 'course'),
    ('passingYear', 'passing_year'),
)


def payload_mismatches(record: CertificateRecord, payload: dict) -> tuple:
    """Record attributes the ledger payload disagrees with (keys absent from the payload are skipped)."""
    mismatched = []
    for key, attribute in LEDGER_PAYLOAD_FIELDS:
        if key not in payload or payload[key] is None:
            continue
        expected = getattr(record, attribute)
        if str(payload[key]).strip() != str(expected).strip():
            mismatched.append(attribute)
    return tuple(mismatched)


class LedgerCheck:
    """
    Digest validation against a LedgerClient.

    Example:
        check = LedgerCheck(records, ledger)
        result = await check.check(candidate)
    """

    def __init__(self, records, ledger=None):
        """
        Args:
            records: RecordRepository (resolves the stored record)
            ledger: LedgerClient, or None when no ledger is configured
        """
        self.records = records
        self.ledger = ledger
        self.logger = get_process_logger('ledger_check')

    async def check(self, candidate: CandidateSubmission) -> CheckResult:
        """
        Run the ledger check for a submission.

        The stored record (by number, else by identity) is checked when
        one exists; otherwise the submission's own fields, legacy flag and
        digest are used.
        """
        stored = await find_stored_record(candidate, self.records)
        record = stored if stored is not None else candidate.as_record()
        return await self.check_record(record)

    async def check_record(self, record: CertificateRecord) -> CheckResult:
        """
        Run the ledger check for a record.

        Raises:
            CollaboratorUnavailable: If the ledger cannot be reached
        """
        if not record.ledger_digest:
            return self._check_without_digest(record)

        if self.ledger is None:
            self.logger.warning(f"{LOG_PROCESS} Ledger not configured")
            return CheckResult(
                check_name=CHECK_LEDGER,
                passed=False,
                confidence=CONFIDENCE_MIN,
                message='Ledger validation unavailable - ledger not configured',
                details=LedgerDetails(digest=record.ledger_digest, is_legacy=record.is_legacy),
            )

        answer = await self.ledger.validate(record.ledger_digest)
        mismatched = payload_mismatches(record, answer.payload) if answer.exists else ()
        details = LedgerDetails(
            digest=record.ledger_digest,
            is_legacy=record.is_legacy,
            ledger_exists=answer.exists,
            payload=dict(answer.payload),
            mismatched_fields=mismatched,
        )

        if answer.exists and not mismatched:
            return CheckResult(
                check_name=CHECK_LEDGER,
                passed=True,
                confidence=LEDGER_CONFIRMED_CONFIDENCE,
                message='Ledger validation successful',
                details=details,
            )

        if not answer.exists:
            reason = 'digest not found on ledger'
        else:
            reason = f"ledger payload disagrees on {', '.join(mismatched)}"

        self.logger.warning(
            f"{LOG_PROCESS} {InconsistentData.__name__}: record {record.id or record.certificate_number} {reason}"
        )
        return CheckResult(
            check_name=CHECK_LEDGER,
            passed=False,
            confidence=CONFIDENCE_MIN,
            message=f"Ledger validation failed - certificate may be tampered ({reason})",
            details=details,
        )

    def _check_without_digest(self, record: CertificateRecord) -> CheckResult:
        if record.is_legacy:
            digest = self._digest(record)
            return CheckResult(
                check_name=CHECK_LEDGER,
                passed=True,
                confidence=LEGACY_CERTIFICATE_CONFIDENCE,
                message='Legacy certificate - digest generated for verification',
                details=LedgerDetails(digest=digest, computed=True, is_legacy=True),
            )

        return CheckResult(
            check_name=CHECK_LEDGER,
            passed=False,
            confidence=CONFIDENCE_MIN,
            message='Missing ledger digest for non-legacy certificate',
            details=LedgerDetails(is_legacy=False),
        )

    def _digest(self, record: CertificateRecord) -> Optional[str]:
        if self.ledger is not None:
            return self.ledger.digest(record)
        return compute_digest(record)


__all__ = ['LedgerCheck', 'payload_mismatches', 'LEDGER_PAYLOAD_FIELDS']
