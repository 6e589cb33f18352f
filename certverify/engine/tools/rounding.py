# Path: certverify/engine/tools/rounding.py
"""
Rounding helpers.

Scores are rounded half-up (85.5 -> 86), not with Python's banker's
rounding, and clamped to the 0-100 confidence range.
"""

from decimal import Decimal, ROUND_HALF_UP

from ..constants import CONFIDENCE_MIN, CONFIDENCE_MAX


def round_half_up(value) -> int:
    """Round a float/Decimal to the nearest int, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def clamp_confidence(value) -> int:
    """Round and clamp to [0, 100]."""
    return max(CONFIDENCE_MIN, min(CONFIDENCE_MAX, round_half_up(value)))


__all__ = ['round_half_up', 'clamp_confidence']
