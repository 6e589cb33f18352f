# Path: certverify/database/repository.py
"""
SQL Repositories

SQLAlchemy-backed RecordRepository and InstitutionRepository.

Queries are synchronous SQLAlchemy calls run in worker threads
(asyncio.to_thread), so concurrent checks do not block the event loop.
Each call opens its own session: every read is a point-in-time
snapshot and no transaction spans a verification.

Driver errors surface as CollaboratorUnavailable.
"""

import asyncio
from typing import Callable, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..constants import LOG_INPUT
from ..core.logger import get_input_logger
from ..exceptions import CollaboratorUnavailable, InputError
from ..models import (
    AggregateStats,
    BlacklistEntry,
    BlacklistType,
    CandidateSubmission,
    CertificateRecord,
    CertificateStatus,
    Institution,
    validate_record,
)
from ..engine.tools.similarity import normalize_text
from .base import Database
from .tables import BlacklistRow, CertificateRow, InstitutionRow


class _SqlRepository:
    """Session handling shared by the SQL repositories."""

    def __init__(self, database: Database, logger_name: str):
        self.database = database
        self.logger = get_input_logger(logger_name)

    def _in_session(self, fn: Callable[[Session], object]):
        with self.database.session_scope() as session:
            return fn(session)

    async def _read(self, fn: Callable[[Session], object]):
        """
        Run a read in a worker thread.

        Raises:
            CollaboratorUnavailable: On any database error
        """
        try:
            return await asyncio.to_thread(self._in_session, fn)
        except SQLAlchemyError as e:
            self.logger.error(f"{LOG_INPUT} Database read failed: {e}")
            raise CollaboratorUnavailable(f"Database unavailable: {e}", collaborator='repository') from e


class SqlRecordRepository(_SqlRepository):
    """
    Certificates and blacklist in SQL tables.

    Example:
        db = Database('sqlite:///certificates.db')
        db.create_all_tables()
        records = SqlRecordRepository(db)
        records.add_record(record)
        found = await records.find_by_certificate_number('RU/2023/BSC/001')
    """

    def __init__(self, database: Database):
        super().__init__(database, 'sql_records')

    # ==========================================================================
    # WRITES (upload / administration)
    # ==========================================================================

    def add_record(self, record: CertificateRecord) -> None:
        """
        Insert a record.

        Raises:
            InputError: If the record violates an invariant or its
                certificate number already exists
        """
        errors = validate_record(record)
        if errors:
            raise InputError(f"Invalid record {record.id}: {'; '.join(errors)}")

        try:
            with self.database.session_scope() as session:
                session.add(CertificateRow.from_model(record))
        except IntegrityError as e:
            raise InputError(
                f"Record {record.id} conflicts with an existing record "
                f"(certificate number {record.certificate_number})"
            ) from e

    def update_status(self, record_id: str, status: CertificateStatus) -> None:
        """
        Raises:
            InputError: If the record does not exist
        """
        with self.database.session_scope() as session:
            row = session.get(CertificateRow, record_id)
            if row is None:
                raise InputError(f"Record {record_id} not found")
            row.status = status.value

    def add_blacklist_entry(self, entry: BlacklistEntry) -> None:
        with self.database.session_scope() as session:
            session.add(BlacklistRow.from_model(entry))

    # ==========================================================================
    # READS
    # ==========================================================================

    async def find_by_certificate_number(self, number: str) -> Optional[CertificateRecord]:
        def query(session: Session):
            row = (
                session.query(CertificateRow)
                .filter(CertificateRow.certificate_number == number.strip())
                .first()
            )
            return row.to_model() if row is not None else None

        if not number:
            return None
        return await self._read(query)

    async def find_by_name_roll_course_year(
        self,
        name: str,
        roll: Optional[str],
        course: Optional[str],
        year: Optional[int],
        institution_id: Optional[str],
    ) -> Optional[CertificateRecord]:
        wanted_name = normalize_text(name)
        if not wanted_name:
            return None

        wanted_course = normalize_text(course) if course is not None else None

        # Exact columns narrow in SQL; name and course are compared on
        # normalized text, the same way the in-memory repository does.
        def query(session: Session):
            filters = []
            if roll is not None:
                filters.append(CertificateRow.roll_number == roll)
            if year is not None:
                filters.append(CertificateRow.passing_year == year)
            if institution_id is not None:
                filters.append(CertificateRow.institution_id == institution_id)

            rows = session.query(CertificateRow).filter(*filters).order_by(CertificateRow.id)
            for row in rows:
                if wanted_name not in normalize_text(row.student_name):
                    continue
                if wanted_course is not None and normalize_text(row.course) != wanted_course:
                    continue
                return row.to_model()
            return None

        return await self._read(query)

    async def find_duplicates(
        self,
        candidate: CandidateSubmission,
        exclude_id: Optional[str],
        include_course: bool = True,
    ) -> list[CertificateRecord]:
        composite = {
            'student_name': candidate.student_name,
            'roll_number': candidate.roll_number,
            'passing_year': candidate.passing_year,
        }
        if include_course:
            composite['course'] = candidate.course

        criteria = []
        if candidate.certificate_number:
            criteria.append(CertificateRow.certificate_number == candidate.certificate_number)
        if all(composite.values()):
            criteria.append(and_(*(
                getattr(CertificateRow, column) == value for column, value in composite.items()
            )))

        if not criteria:
            return []

        def query(session: Session):
            q = session.query(CertificateRow).filter(or_(*criteria))
            if exclude_id is not None:
                q = q.filter(CertificateRow.id != exclude_id)
            return [row.to_model() for row in q.order_by(CertificateRow.id).all()]

        return await self._read(query)

    async def aggregate_stats(self, institution_id: str, course: str) -> AggregateStats:
        def query(session: Session):
            mean_cgpa, mean_percentage, count = (
                session.query(
                    func.avg(CertificateRow.cgpa),
                    func.avg(CertificateRow.percentage),
                    func.count(CertificateRow.id),
                )
                .filter(
                    CertificateRow.institution_id == institution_id,
                    CertificateRow.course == course,
                    CertificateRow.status == CertificateStatus.VERIFIED.value,
                )
                .one()
            )
            return AggregateStats(
                mean_cgpa=float(mean_cgpa) if mean_cgpa is not None else None,
                mean_percentage=float(mean_percentage) if mean_percentage is not None else None,
                sample_size=int(count or 0),
            )

        return await self._read(query)

    async def find_blacklist_entry(
        self,
        entry_type: BlacklistType,
        identifier: str,
    ) -> Optional[BlacklistEntry]:
        wanted = normalize_text(identifier)

        def query(session: Session):
            rows = (
                session.query(BlacklistRow)
                .filter(
                    BlacklistRow.entry_type == entry_type.value,
                    BlacklistRow.is_active.is_(True),
                )
                .order_by(BlacklistRow.id)
            )
            for row in rows:
                if normalize_text(row.identifier) == wanted:
                    return row.to_model()
            return None

        return await self._read(query)


class SqlInstitutionRepository(_SqlRepository):
    """Institutions in the SQL institutions table."""

    def __init__(self, database: Database):
        super().__init__(database, 'sql_institutions')

    def add(self, institution: Institution) -> None:
        with self.database.session_scope() as session:
            session.merge(InstitutionRow.from_model(institution))

    async def find_by_id(self, institution_id: str) -> Optional[Institution]:
        def query(session: Session):
            row = session.get(InstitutionRow, institution_id)
            return row.to_model() if row is not None else None

        return await self._read(query)


__all__ = ['SqlRecordRepository', 'SqlInstitutionRepository']
