# Path: certverify/engine/tools/__init__.py
"""
Engine Tools

Stateless helpers used by the checks:
- similarity: normalized Levenshtein similarity
- digest: canonical certificate digest
- rounding: half-up rounding and confidence clamping
- lookup: stored-record resolution
"""

from .similarity import normalize_text, edit_distance, similarity
from .digest import canonical_payload, compute_digest
from .rounding import round_half_up, clamp_confidence
from .lookup import locate_record, find_stored_record, own_record_id

__all__ = [
    'normalize_text',
    'edit_distance',
    'similarity',
    'canonical_payload',
    'compute_digest',
    'round_half_up',
    'clamp_confidence',
    'locate_record',
    'find_stored_record',
    'own_record_id',
]
