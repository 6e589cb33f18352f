# Path: certverify/output/__init__.py
"""Certificate Verification Output (OUTPUT layer): JSON reports."""

from .report_generator import ReportGenerator, check_to_dict

__all__ = ['ReportGenerator', 'check_to_dict']
