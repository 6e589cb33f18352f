# Path: certverify/engine/scoring/score_calculator.py
"""
Score Calculator for Certificate Verification

Aggregates the five check results into the overall confidence and the
anomaly findings into a risk score and risk level.

    overall_confidence = round_half_up(sum(weight_i * confidence_i) / sum(weight_i))

Weights are Decimal so the sum and the weighted average are exact.
The overall confidence is only defined over all five checks; partial
aggregation is refused.
"""

from decimal import Decimal
from typing import Optional

from ...constants import CHECK_NAMES
from ...core.logger import get_process_logger
from ...models import AnomalyFinding, CheckResult
from ..constants import (
    RISK_LEVEL_MINIMAL,
    RISK_LEVEL_THRESHOLDS,
)
from ..settings import EngineSettings
from ..tools.rounding import clamp_confidence, round_half_up


class ScoreCalculator:
    """
    Calculates verification scores from check results.

    Example:
        calculator = ScoreCalculator(settings)
        overall = calculator.overall_confidence(checks)
        valid = calculator.is_valid(overall)
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()
        self.logger = get_process_logger('score_calculator')

    def overall_confidence(self, checks: dict[str, CheckResult]) -> int:
        """
        Weighted combination of all check confidences.

        Args:
            checks: Check name -> CheckResult for every name in CHECK_NAMES

        Returns:
            Overall confidence 0-100

        Raises:
            ValueError: If any check is missing
        """
        missing = [name for name in CHECK_NAMES if name not in checks]
        if missing:
            raise ValueError(f"Cannot aggregate without checks: {missing}")

        weighted = Decimal(0)
        total_weight = Decimal(0)
        for name in CHECK_NAMES:
            weight = self.settings.weight_of(name)
            weighted += weight * Decimal(checks[name].confidence)
            total_weight += weight

        overall = clamp_confidence(weighted / total_weight)
        self.logger.debug(f"Overall confidence {overall} from {len(checks)} checks")
        return overall

    def is_valid(self, overall_confidence: int) -> bool:
        return overall_confidence >= self.settings.validity_threshold

    @staticmethod
    def risk_score(findings: list[AnomalyFinding]) -> int:
        """Mean risk score of the findings, 0 when there are none."""
        if not findings:
            return 0
        return min(100, round_half_up(
            Decimal(sum(f.risk_score for f in findings)) / Decimal(len(findings))
        ))

    @staticmethod
    def risk_level(risk_score: int) -> str:
        for threshold, level in RISK_LEVEL_THRESHOLDS:
            if risk_score >= threshold:
                return level
        return RISK_LEVEL_MINIMAL


__all__ = ['ScoreCalculator']
