# Path: certverify/engine/processors/orchestrator.py
"""
Verification Orchestrator

Runs the five independent checks over a submission and assembles the
VerificationResult.

    RECEIVED -> CHECKING -> COMPLETED | FAILED

Checks are spawned together as asyncio tasks (fan-out) and joined
before any aggregation (fan-in). They suspend only on repository and
ledger calls.

Failure handling:
1. Submission without certificate number and student name: FAILED
   before any check runs (InputError)
2. A check raising: that check alone fails at confidence 0 with
   ErrorDetails; the other checks are unaffected
3. Every check raising: FAILED
4. Cancel event or deadline firing while checks are pending: pending
   checks are cancelled and the result is FAILED (no partial aggregate)
5. The awaiting task being cancelled: checks are cancelled and
   CancelledError propagates
"""

import asyncio
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Optional, Union

from ...constants import (
    CHECK_RECORD_MATCH,
    CHECK_LEDGER,
    CHECK_ANOMALY_DETECTION,
    CHECK_INSTITUTION,
    CHECK_DUPLICATE,
    CHECK_NAMES,
    VERIFICATION_REASON_PREFIX,
    LOG_PROCESS,
)
from ...core.logger import get_process_logger
from ...exceptions import InputError
from ...models import (
    AnomalyDetails,
    CandidateSubmission,
    CheckResult,
    ErrorDetails,
    VerificationResult,
    VerificationState,
)
from ..checks import (
    RecordMatcher,
    LedgerCheck,
    AnomalyDetector,
    InstitutionCheck,
    DuplicateCheck,
)
from ..constants import CONFIDENCE_MIN
from ..scoring import ScoreCalculator
from ..settings import EngineSettings


@dataclass(frozen=True)
class VerificationContext:
    """
    Per-call context.

    Attributes:
        requested_by: Caller identity (recorded in logs only)
        timeout: Deadline in seconds from the start of the call
        cancel_event: Setting this event abandons the verification
        purpose: Free-text reason for the request
    """
    requested_by: Optional[str] = None
    timeout: Optional[float] = None
    cancel_event: Optional[asyncio.Event] = None
    purpose: Optional[str] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VerificationOrchestrator:
    """
    Coordinates the verification checks.

    Example:
        orchestrator = VerificationOrchestrator(records, institutions, ledger)
        result = await orchestrator.verify(candidate)
        if result.is_valid:
            ...
    """

    def __init__(
        self,
        records,
        institutions,
        ledger=None,
        settings: Optional[EngineSettings] = None,
        today: Callable[[], date] = date.today,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Args:
            records: RecordRepository
            institutions: InstitutionRepository
            ledger: LedgerClient, or None (ledger check then fails)
            settings: Engine settings
            today: Date source for the temporal anomaly rules
            clock: Timestamp source for verified_at
        """
        self.settings = settings or EngineSettings()
        self.clock = clock
        self.logger = get_process_logger('orchestrator')

        self.scores = ScoreCalculator(self.settings)
        self.checks = {
            CHECK_RECORD_MATCH: RecordMatcher(records, self.settings),
            CHECK_LEDGER: LedgerCheck(records, ledger),
            CHECK_ANOMALY_DETECTION: AnomalyDetector(records, self.settings, today=today),
            CHECK_INSTITUTION: InstitutionCheck(institutions, records),
            CHECK_DUPLICATE: DuplicateCheck(records),
        }

    # ==========================================================================
    # PUBLIC API
    # ==========================================================================

    async def verify(
        self,
        submission: Union[CandidateSubmission, dict],
        context: Optional[VerificationContext] = None,
    ) -> VerificationResult:
        """
        Verify a submission.

        Args:
            submission: CandidateSubmission or a dict of declared fields
            context: Deadline, cancellation token and caller identity

        Returns:
            VerificationResult (never raises for check or collaborator errors)

        Raises:
            asyncio.CancelledError: If the awaiting task itself is cancelled
        """
        context = context or VerificationContext()
        if isinstance(submission, dict):
            submission = CandidateSubmission.from_dict(submission)

        state = VerificationState.RECEIVED
        self.logger.info(
            f"{LOG_PROCESS} {state.value}: {submission.certificate_number or submission.student_name!r} "
            f"requested_by={context.requested_by}"
        )

        try:
            self._validate_input(submission)
        except InputError as e:
            self.logger.warning(f"{LOG_PROCESS} Rejected submission: {e}")
            return self._failed(str(e))

        state = VerificationState.CHECKING
        self.logger.debug(f"{LOG_PROCESS} {state.value}: dispatching {len(CHECK_NAMES)} checks")

        tasks = {
            name: asyncio.create_task(self._run_check(name, submission), name=name)
            for name in CHECK_NAMES
        }
        abort_reason = await self._join(tasks, context)

        if abort_reason is not None:
            completed = {
                name: task.result()
                for name, task in tasks.items()
                if task.done() and not task.cancelled()
            }
            self.logger.warning(f"{LOG_PROCESS} Verification {abort_reason}")
            return self._failed(abort_reason, completed)

        checks = {name: tasks[name].result() for name in CHECK_NAMES}
        return self._assemble(checks)

    # ==========================================================================
    # FAN-OUT / FAN-IN
    # ==========================================================================

    def _validate_input(self, submission: CandidateSubmission) -> None:
        if not submission.has_identity():
            raise InputError("Submission has neither certificate number nor student name")

    async def _run_check(self, name: str, submission: CandidateSubmission) -> CheckResult:
        """Run one check, converting any error into a failed CheckResult."""
        try:
            return await self.checks[name].check(submission)
        except Exception as e:
            self.logger.error(f"{LOG_PROCESS} Check {name} failed: {type(e).__name__}: {e}")
            return CheckResult(
                check_name=name,
                passed=False,
                confidence=CONFIDENCE_MIN,
                message=f"Check could not complete: {e}",
                details=ErrorDetails(
                    error_type=type(e).__name__,
                    error=str(e),
                    collaborator=getattr(e, 'collaborator', None),
                ),
            )

    async def _join(
        self,
        tasks: dict[str, asyncio.Task],
        context: VerificationContext,
    ) -> Optional[str]:
        """
        Wait for every check task.

        Returns:
            None when all checks finished, otherwise the abort reason
            ('cancelled' or 'timed out'); pending checks are cancelled
        """
        loop = asyncio.get_running_loop()
        timeout = context.timeout if context.timeout is not None else self.settings.verification_timeout
        deadline = loop.time() + timeout if timeout is not None else None

        pending = set(tasks.values())
        cancel_waiter = None
        if context.cancel_event is not None:
            cancel_waiter = asyncio.create_task(context.cancel_event.wait())

        abort_reason = None
        try:
            while pending:
                if context.cancel_event is not None and context.cancel_event.is_set():
                    abort_reason = 'cancelled'
                    break

                remaining = None
                if deadline is not None:
                    remaining = deadline - loop.time()
                    if remaining <= 0:
                        abort_reason = f"timed out after {timeout:g}s"
                        break

                waiters = set(pending)
                if cancel_waiter is not None:
                    waiters.add(cancel_waiter)

                done, _ = await asyncio.wait(
                    waiters,
                    timeout=remaining,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                pending -= done

                # the event may be cleared again before the next pass
                if cancel_waiter is not None and cancel_waiter in done and pending:
                    abort_reason = 'cancelled'
                    break
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()
            for task in pending:
                task.cancel()

        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        return abort_reason

    # ==========================================================================
    # RESULT ASSEMBLY
    # ==========================================================================

    def _assemble(self, checks: dict[str, CheckResult]) -> VerificationResult:
        if all(check.is_error for check in checks.values()):
            self.logger.error(f"{LOG_PROCESS} Every check failed to complete")
            return VerificationResult(
                state=VerificationState.FAILED,
                is_valid=False,
                overall_confidence=CONFIDENCE_MIN,
                checks=checks,
                flagged_reasons=self._flagged_reasons(checks),
                verified_at=self.clock(),
            )

        overall = self.scores.overall_confidence(checks)
        anomaly_check = checks[CHECK_ANOMALY_DETECTION]
        findings = ()
        if isinstance(anomaly_check.details, AnomalyDetails):
            findings = anomaly_check.details.findings
        risk_score = self.scores.risk_score(list(findings))

        result = VerificationResult(
            state=VerificationState.COMPLETED,
            is_valid=self.scores.is_valid(overall),
            overall_confidence=overall,
            checks=checks,
            anomalies=findings,
            flagged_reasons=self._flagged_reasons(checks),
            risk_score=risk_score,
            risk_level=self.scores.risk_level(risk_score),
            verified_at=self.clock(),
        )
        self.logger.info(
            f"{LOG_PROCESS} {result.state.value}: confidence={overall} "
            f"valid={result.is_valid} anomalies={len(findings)}"
        )
        return result

    @staticmethod
    def _flagged_reasons(checks: dict[str, CheckResult]) -> tuple:
        return tuple(
            f"{name}: {checks[name].message}"
            for name in CHECK_NAMES
            if name in checks and not checks[name].passed
        )

    def _failed(self, reason: str, checks: Optional[dict] = None) -> VerificationResult:
        return VerificationResult(
            state=VerificationState.FAILED,
            is_valid=False,
            overall_confidence=CONFIDENCE_MIN,
            checks=dict(checks or {}),
            flagged_reasons=(f"{VERIFICATION_REASON_PREFIX}: {reason}",),
            verified_at=self.clock(),
        )


async def verify_certificate(
    submission: Union[CandidateSubmission, dict],
    records,
    institutions,
    ledger=None,
    settings: Optional[EngineSettings] = None,
    context: Optional[VerificationContext] = None,
) -> VerificationResult:
    """
    Convenience function for a single verification.

    Example:
        result = await verify_certificate(candidate, records, institutions, ledger)
    """
    orchestrator = VerificationOrchestrator(records, institutions, ledger, settings)
    return await orchestrator.verify(submission, context)


__all__ = ['VerificationOrchestrator', 'VerificationContext', 'verify_certificate']
