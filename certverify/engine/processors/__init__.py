# Path: certverify/engine/processors/__init__.py
"""
Verification Processors

Usage:
    from certverify.engine.processors import (
        VerificationOrchestrator,
        VerificationContext,
        verify_certificate,
    )

    orchestrator = VerificationOrchestrator(records, institutions, ledger)
    result = await orchestrator.verify(candidate, VerificationContext(timeout=5))
"""

from .orchestrator import VerificationOrchestrator, VerificationContext, verify_certificate

__all__ = ['VerificationOrchestrator', 'VerificationContext', 'verify_certificate']
