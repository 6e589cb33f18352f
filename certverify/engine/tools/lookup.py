# Path: certverify/engine/tools/lookup.py
"""
Stored-record lookup shared by the checks.

Each check resolves the stored certificate on its own (point-in-time
read) so the five checks stay independent of each other. All of them,
the record matcher included, go through locate_record() so they agree
on which record a submission represents.

Lookup order:
1. Exact certificate number (authoritative key)
2. Student name + roll number + course + passing year + institution,
   each used when present
"""

from typing import Optional

from ...models import CandidateSubmission, CertificateRecord, MatchMethod


async def locate_record(
    candidate: CandidateSubmission,
    records,
    institution_id: Optional[str] = None,
) -> tuple[Optional[CertificateRecord], MatchMethod]:
    """
    Find the stored record a submission claims to be.

    Args:
        candidate: Submission being verified
        records: RecordRepository
        institution_id: Restrict the fallback lookup to this institution
            (defaults to the candidate's institution)

    Returns:
        (CertificateRecord or None, lookup path that was last tried)
    """
    if candidate.certificate_number:
        record = await records.find_by_certificate_number(candidate.certificate_number)
        if record is not None:
            return record, MatchMethod.CERTIFICATE_NUMBER

    if not candidate.student_name:
        return None, MatchMethod.CERTIFICATE_NUMBER

    record = await records.find_by_name_roll_course_year(
        candidate.student_name,
        candidate.roll_number,
        candidate.course,
        candidate.passing_year,
        institution_id or candidate.institution_id,
    )
    return record, MatchMethod.NAME_ROLL_INSTITUTION


async def find_stored_record(
    candidate: CandidateSubmission,
    records,
) -> Optional[CertificateRecord]:
    """Stored record the candidate represents, or None."""
    record, _ = await locate_record(candidate, records)
    return record


def own_record_id(
    candidate: CandidateSubmission,
    stored: Optional[CertificateRecord],
) -> Optional[str]:
    """Id of the record the candidate represents (excluded from duplicate searches)."""
    if candidate.record_id:
        return candidate.record_id
    return stored.id if stored is not None else None


__all__ = ['locate_record', 'find_stored_record', 'own_record_id']
