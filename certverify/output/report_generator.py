# Path: certverify/output/report_generator.py
"""
Report Generator for Certificate Verification

Serializes a VerificationResult into a JSON report.
"""

import json
from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Optional

from ..constants import LOG_OUTPUT, REPORT_FILE
from ..core.logger import get_output_logger
from ..models import CheckResult, VerificationResult

REPORT_TYPE = 'certificate_verification'


def _json_default(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def check_to_dict(check: CheckResult) -> dict:
    details = None
    if check.details is not None:
        details = {'kind': check.details.kind, **asdict(check.details)}
    return {
        'passed': check.passed,
        'confidence': check.confidence,
        'message': check.message,
        'details': details,
    }


class ReportGenerator:
    """
    Creates verification report JSON files.

    Report contents:
    - State, validity and overall confidence
    - Per-check results with typed details
    - Anomaly findings (highest risk first), risk score and level
    - Flagged reasons and verification notes

    Example:
        generator = ReportGenerator(output_dir=Path('reports'))
        path = generator.generate_report(result)
    """

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Args:
            output_dir: Directory for reports written without an explicit path
                (defaults to the current directory)
        """
        self.output_dir = Path(output_dir) if output_dir else Path.cwd()
        self.logger = get_output_logger('report_generator')

    def build_report(self, result: VerificationResult) -> dict:
        """Build the report dictionary."""
        return {
            'report_type': REPORT_TYPE,
            'state': result.state.value,
            'is_valid': result.is_valid,
            'overall_confidence': result.overall_confidence,
            'verified_at': result.verified_at.isoformat() if result.verified_at else None,
            'checks': {name: check_to_dict(check) for name, check in result.checks.items()},
            'anomalies': [finding.to_dict() for finding in result.anomalies],
            'risk_score': result.risk_score,
            'risk_level': result.risk_level,
            'flagged_reasons': list(result.flagged_reasons),
            'notes': result.notes,
        }

    def to_json(self, result: VerificationResult) -> str:
        return json.dumps(self.build_report(result), indent=2, default=_json_default)

    def generate_report(
        self,
        result: VerificationResult,
        output_path: Optional[Path] = None,
    ) -> Path:
        """
        Write the report JSON.

        Args:
            result: VerificationResult from the orchestrator
            output_path: Optional custom output path

        Returns:
            Path to generated report file
        """
        if output_path is None:
            output_path = self.output_dir / REPORT_FILE
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(self.to_json(result))

        self.logger.info(f"{LOG_OUTPUT} Report saved to: {output_path}")
        return output_path


__all__ = ['ReportGenerator', 'check_to_dict']
