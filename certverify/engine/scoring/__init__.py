# Path: certverify/engine/scoring/__init__.py
"""Scoring: overall confidence, validity and risk level."""

from .score_calculator import ScoreCalculator

__all__ = ['ScoreCalculator']
