# Path: certverify/database/__init__.py
"""
Certificate Verification Database (INPUT layer)

SQLAlchemy tables and the SQL-backed repositories.

Usage:
    from certverify.database import Database, SqlRecordRepository, SqlInstitutionRepository

    db = Database.from_config(config)
    db.create_all_tables()
    records = SqlRecordRepository(db)
    institutions = SqlInstitutionRepository(db)
"""

from .base import Base, Database
from .tables import InstitutionRow, CertificateRow, BlacklistRow
from .repository import SqlRecordRepository, SqlInstitutionRepository

__all__ = [
    'Base',
    'Database',
    'InstitutionRow',
    'CertificateRow',
    'BlacklistRow',
    'SqlRecordRepository',
    'SqlInstitutionRepository',
]
