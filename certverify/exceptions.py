# Path: certverify/exceptions.py
"""
Exceptions for Certificate Verification

Error taxonomy shared by the engine and its collaborators.
Only InputError stops a verification before checks run; every other
error raised inside a check is captured and turned into a failed
CheckResult by the orchestrator.
"""


class CertVerifyError(Exception):
    """Base class for all certificate verification errors."""
    pass


class InputError(CertVerifyError):
    """Submission or record is missing mandatory fields or is malformed."""
    pass


class CollaboratorUnavailable(CertVerifyError):
    """
    A repository or ledger call failed.

    Attributes:
        collaborator: Name of the failing collaborator (e.g. 'ledger')
    """

    def __init__(self, message: str, collaborator: str = 'repository'):
        super().__init__(message)
        self.collaborator = collaborator


class InconsistentData(CertVerifyError):
    """Stored data disagrees with the ledger (tampering evidence)."""
    pass


class ConfigurationError(CertVerifyError):
    """Configuration is missing or invalid."""
    pass


__all__ = [
    'CertVerifyError',
    'InputError',
    'CollaboratorUnavailable',
    'InconsistentData',
    'ConfigurationError',
]
