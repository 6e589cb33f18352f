# Path: certverify/core/config_loader.py
"""
Configuration Loader for Certificate Verification

Loads configuration from an optional .env file and CERTVERIFY_*
environment variables.

NO hardcoded paths, NO magic numbers.
Each owner constructs its own ConfigLoader and passes it down; there is
no process-wide instance.
"""

import os
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv

from ..constants import ENV_FILE


# ==============================================================================
# DEFAULT CONFIGURATION VALUES
# ==============================================================================

# Ledger HTTP client
DEFAULT_LEDGER_TIMEOUT: float = 10.0
DEFAULT_LEDGER_RETRY_ATTEMPTS: int = 3

# Whole-verification deadline (seconds)
DEFAULT_VERIFICATION_TIMEOUT: float = 30.0

# Database pool
DEFAULT_POOL_SIZE: int = 5
DEFAULT_POOL_MAX_OVERFLOW: int = 10


class ConfigLoader:
    """
    Configuration loader for the verification engine and its collaborators.

    Loads configuration from environment variables with validation,
    type conversion, and sensible defaults.

    Example:
        config = ConfigLoader()
        threshold = config.get('validity_threshold')  # Returns int
        ledger_url = config.get('ledger_url')         # Returns str or None
    """

    def __init__(self, env_file: Optional[Path] = None, load_env: bool = True):
        """
        Initialize configuration loader.

        Args:
            env_file: Explicit .env path; defaults to ./.env when present
            load_env: Set False to read only the current process environment
        """
        if load_env:
            env_path = Path(env_file) if env_file else Path.cwd() / ENV_FILE
            if env_path.exists():
                load_dotenv(dotenv_path=env_path, interpolate=True)

        self._config = self._load_configuration()

    def _load_configuration(self) -> dict[str, any]:
        """
        Load and validate all configuration from environment.

        Returns:
            Dictionary of validated configuration values with proper types
        """
        config = {
            # ================================================================
            # ENVIRONMENT & DEBUG
            # ================================================================
            'environment': self._get_env('CERTVERIFY_ENVIRONMENT', 'development'),
            'debug': self._get_bool('CERTVERIFY_DEBUG', False),

            # ================================================================
            # LOGGING CONFIGURATION
            # ================================================================
            'log_dir': self._get_path('CERTVERIFY_LOG_DIR'),
            'log_level': self._get_env('CERTVERIFY_LOG_LEVEL', 'INFO'),
            'log_console': self._get_bool('CERTVERIFY_LOG_CONSOLE', True),

            # ================================================================
            # COLLABORATORS
            # ================================================================
            'database_url': self._get_env('CERTVERIFY_DATABASE_URL'),
            'pool_size': self._get_int('CERTVERIFY_POOL_SIZE', DEFAULT_POOL_SIZE),
            'pool_max_overflow': self._get_int(
                'CERTVERIFY_POOL_MAX_OVERFLOW', DEFAULT_POOL_MAX_OVERFLOW
            ),
            'ledger_url': self._get_env('CERTVERIFY_LEDGER_URL'),
            'ledger_timeout': self._get_float(
                'CERTVERIFY_LEDGER_TIMEOUT', DEFAULT_LEDGER_TIMEOUT
            ),
            'ledger_retry_attempts': self._get_int(
                'CERTVERIFY_LEDGER_RETRY_ATTEMPTS', DEFAULT_LEDGER_RETRY_ATTEMPTS
            ),

            # ================================================================
            # VERIFICATION CONFIGURATION
            # ================================================================
            'verification_timeout': self._get_float(
                'CERTVERIFY_VERIFICATION_TIMEOUT', DEFAULT_VERIFICATION_TIMEOUT
            ),
            # Tuning keys stay None unless set; EngineSettings supplies defaults
            'validity_threshold': self._get_int(
                'CERTVERIFY_VALIDITY_THRESHOLD', None
            ),
            'match_threshold': self._get_int(
                'CERTVERIFY_MATCH_THRESHOLD', None
            ),

            # ================================================================
            # ANOMALY RULES
            # ================================================================
            'cgpa_percentage_factor': self._get_float(
                'CERTVERIFY_CGPA_PERCENTAGE_FACTOR', None
            ),
            'min_sample_size': self._get_int(
                'CERTVERIFY_MIN_SAMPLE_SIZE', None
            ),
            'cgpa_outlier_deviation': self._get_float(
                'CERTVERIFY_CGPA_OUTLIER_DEVIATION', None
            ),
            'low_ocr_confidence': self._get_float(
                'CERTVERIFY_LOW_OCR_CONFIDENCE', None
            ),
        }

        return config

    def _get_env(
        self,
        key: str,
        default: Optional[str] = None,
        required: bool = False
    ) -> Optional[str]:
        """Get string environment variable."""
        value = os.getenv(key)

        if value is None or not value.strip():
            if required:
                raise ValueError(f"Required environment variable '{key}' is not set")
            return default

        return value.strip()

    def _get_bool(self, key: str, default: bool) -> bool:
        """Get boolean environment variable."""
        value = os.getenv(key)
        if value is None:
            return default

        return value.strip().lower() in ('true', '1', 'yes', 'on')

    def _get_int(self, key: str, default: int) -> int:
        """Get integer environment variable."""
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value.strip())
        except ValueError:
            return default

    def _get_float(self, key: str, default: float) -> float:
        """Get float environment variable."""
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return float(value.strip())
        except ValueError:
            return default

    def _get_path(self, key: str, required: bool = False) -> Optional[Path]:
        """Get path environment variable."""
        value = os.getenv(key)

        if value is None or not value.strip():
            if required:
                raise ValueError(f"Required environment variable '{key}' is not set")
            return None

        return Path(value.strip())

    def get(self, key: str, default: any = None) -> any:
        """Get configuration value."""
        value = self._config.get(key)
        return default if value is None else value

    def __getitem__(self, key: str) -> any:
        """Get configuration value using dictionary syntax."""
        return self._config[key]

    def __contains__(self, key: str) -> bool:
        """Check if configuration key exists."""
        return key in self._config

    def keys(self):
        """Get all configuration keys."""
        return self._config.keys()

    def items(self):
        """Get all configuration key-value pairs."""
        return self._config.items()


__all__ = ['ConfigLoader']
