# Path: certverify/engine/constants/__init__.py
"""
Engine Constants

- weights: check weights, record-match field weights, decision thresholds
- anomaly: anomaly rule patterns, risk scores, deductions
"""

from .weights import *  # noqa: F401,F403
from .anomaly import *  # noqa: F401,F403
from .weights import __all__ as _weights_all
from .anomaly import __all__ as _anomaly_all

__all__ = list(_weights_all) + list(_anomaly_all)
