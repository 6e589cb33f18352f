# Path: certverify/engine/settings.py
"""
Engine Settings

Every tunable engine value in one immutable object, defaulting to the
constants in certverify/engine/constants/. Components receive the
settings at construction; nothing reads configuration globally.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Optional

from ..exceptions import ConfigurationError
from ..constants import CHECK_NAMES
from ..models.enums import Severity
from .constants import (
    CHECK_WEIGHTS,
    VALIDITY_THRESHOLD,
    MATCH_THRESHOLD,
    MATCH_FIELD_WEIGHTS,
    SEVERITY_DEDUCTIONS,
    CGPA_PERCENTAGE_FACTOR,
    GRADE_INCONSISTENCY_MEDIUM_DEVIATION,
    GRADE_INCONSISTENCY_HIGH_DEVIATION,
    MIN_SAMPLE_SIZE,
    CGPA_OUTLIER_DEVIATION,
    PERCENTAGE_OUTLIER_DEVIATION,
    LOW_OCR_CONFIDENCE_THRESHOLD,
    CONFIDENCE_MIN,
    CONFIDENCE_MAX,
)


@dataclass(frozen=True)
class EngineSettings:
    """
    Tunable engine values.

    Attributes:
        validity_threshold: overall_confidence needed for is_valid
        match_threshold: record match score needed to accept a match
        check_weights: Check name -> Decimal weight (must sum to 1)
        field_weights: Record-match field -> weight
        severity_deductions: Severity -> anomaly confidence deduction
        cgpa_percentage_factor: expected_percentage = cgpa * factor
        grade_medium_deviation: Deviation raising MEDIUM GRADE_INCONSISTENCY
        grade_high_deviation: Deviation raising HIGH GRADE_INCONSISTENCY
        min_sample_size: Aggregate size needed for statistical checks
        cgpa_outlier_deviation: CGPA distance from the mean flagged as outlier
        percentage_outlier_deviation: Percentage distance flagged as outlier
        low_ocr_confidence: OCR confidence below this is flagged
        verification_timeout: Default deadline (seconds) when the context has none
    """
    validity_threshold: int = VALIDITY_THRESHOLD
    match_threshold: int = MATCH_THRESHOLD
    check_weights: dict = field(default_factory=lambda: dict(CHECK_WEIGHTS))
    field_weights: dict = field(default_factory=lambda: dict(MATCH_FIELD_WEIGHTS))
    severity_deductions: dict = field(default_factory=lambda: dict(SEVERITY_DEDUCTIONS))
    cgpa_percentage_factor: float = CGPA_PERCENTAGE_FACTOR
    grade_medium_deviation: float = GRADE_INCONSISTENCY_MEDIUM_DEVIATION
    grade_high_deviation: float = GRADE_INCONSISTENCY_HIGH_DEVIATION
    min_sample_size: int = MIN_SAMPLE_SIZE
    cgpa_outlier_deviation: float = CGPA_OUTLIER_DEVIATION
    percentage_outlier_deviation: float = PERCENTAGE_OUTLIER_DEVIATION
    low_ocr_confidence: float = LOW_OCR_CONFIDENCE_THRESHOLD
    verification_timeout: Optional[float] = None

    def __post_init__(self):
        self._validate()

    def _validate(self) -> None:
        """
        Raises:
            ConfigurationError: If any value is out of range
        """
        for name in ('validity_threshold', 'match_threshold'):
            value = getattr(self, name)
            if not CONFIDENCE_MIN <= value <= CONFIDENCE_MAX:
                raise ConfigurationError(f"{name}={value} outside [0, 100]")

        missing = set(CHECK_NAMES) - set(self.check_weights)
        if missing:
            raise ConfigurationError(f"Missing check weights: {sorted(missing)}")

        total = sum(Decimal(str(w)) for w in self.check_weights.values())
        if total != Decimal('1'):
            raise ConfigurationError(f"Check weights must sum to 1, got {total}")

        if any(w <= 0 for w in self.field_weights.values()):
            raise ConfigurationError("Record match field weights must be positive")

        missing_severities = set(Severity) - set(self.severity_deductions)
        if missing_severities:
            raise ConfigurationError(
                f"Missing severity deductions: {sorted(s.value for s in missing_severities)}"
            )

        if self.grade_medium_deviation > self.grade_high_deviation:
            raise ConfigurationError(
                "grade_medium_deviation must not exceed grade_high_deviation"
            )

        if self.cgpa_percentage_factor <= 0:
            raise ConfigurationError("cgpa_percentage_factor must be positive")

    @classmethod
    def from_config(cls, config) -> 'EngineSettings':
        """
        Build settings from a ConfigLoader, keeping defaults for unset keys.

        Args:
            config: certverify.core.ConfigLoader (or any object with .get())

        Returns:
            EngineSettings
        """
        defaults = cls()
        return replace(
            defaults,
            validity_threshold=config.get('validity_threshold', defaults.validity_threshold),
            match_threshold=config.get('match_threshold', defaults.match_threshold),
            cgpa_percentage_factor=config.get(
                'cgpa_percentage_factor', defaults.cgpa_percentage_factor
            ),
            min_sample_size=config.get('min_sample_size', defaults.min_sample_size),
            cgpa_outlier_deviation=config.get(
                'cgpa_outlier_deviation', defaults.cgpa_outlier_deviation
            ),
            low_ocr_confidence=config.get('low_ocr_confidence', defaults.low_ocr_confidence),
            verification_timeout=config.get('verification_timeout'),
        )

    def weight_of(self, check_name: str) -> Decimal:
        return Decimal(str(self.check_weights[check_name]))


__all__ = ['EngineSettings']
