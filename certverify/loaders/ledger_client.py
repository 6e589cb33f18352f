# Path: certverify/loaders/ledger_client.py
"""
Ledger Clients

- InMemoryLedger: digest -> payload map (tests, offline datasets)
- HttpLedgerClient: async HTTP client for a ledger gateway with retry
  logic

Both compute digests with engine.tools.digest.compute_digest so a
digest registered through one is found through the other.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import aiohttp
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    RetryError,
)

from ..constants import LOG_INPUT, LOG_OUTPUT, LOG_PROCESS
from ..core.logger import get_input_logger
from ..exceptions import CollaboratorUnavailable, ConfigurationError
from ..models import CertificateRecord, LedgerValidation
from ..engine.tools.digest import compute_digest

# HTTP status handling
HTTP_OK = 200
HTTP_NOT_FOUND = 404
RETRYABLE_STATUS_CODES = {500, 502, 503, 504}

LEDGER_CERTIFICATE_PATH = '/certificates/{digest}'


class InMemoryLedger:
    """
    Ledger held in memory.

    Example:
        ledger = InMemoryLedger()
        digest = ledger.register(record)
        answer = await ledger.validate(digest)  # exists=True
    """

    def __init__(self, entries: Optional[dict[str, dict]] = None):
        self._entries: dict[str, dict] = {
            k.lower(): dict(v) for k, v in (entries or {}).items()
        }

    def digest(self, record: CertificateRecord) -> str:
        return compute_digest(record)

    def register(self, record: CertificateRecord) -> str:
        """Register a record's digest with its identifying payload."""
        digest = self.digest(record)
        self._entries[digest] = {
            'studentName': record.student_name,
            'course': record.course,
            'passingYear': record.passing_year,
        }
        return digest

    async def validate(self, digest: str) -> LedgerValidation:
        payload = self._entries.get(digest.strip().lower())
        if payload is None:
            return LedgerValidation(exists=False)
        return LedgerValidation(exists=True, payload=dict(payload))

    @classmethod
    def from_file(cls, path: Path) -> 'InMemoryLedger':
        """Load {digest: payload} entries from a JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            return cls(json.load(f))


class HttpLedgerClient:
    """
    Async HTTP client for a ledger gateway.

    GET {base_url}/certificates/{digest}
        200 -> exists, JSON body is the payload
        404 -> does not exist

    Features:
    - Automatic retry with exponential backoff on connection errors and 5xx
    - Timeout handling
    - Failures after retries surface as CollaboratorUnavailable
    """

    def __init__(
        self,
        base_url: Optional[str],
        timeout: float = 10.0,
        retry_attempts: int = 3,
    ):
        """
        Args:
            base_url: Ledger gateway URL
            timeout: Per-request timeout in seconds
            retry_attempts: Attempts before giving up

        Raises:
            ConfigurationError: If base_url is empty
        """
        if not base_url:
            raise ConfigurationError("Ledger URL is not configured (CERTVERIFY_LEDGER_URL)")

        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)
        self.logger = get_input_logger('http_ledger')
        self._session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_config(cls, config) -> 'HttpLedgerClient':
        return cls(
            base_url=config.get('ledger_url'),
            timeout=config.get('ledger_timeout'),
            retry_attempts=config.get('ledger_retry_attempts'),
        )

    def digest(self, record: CertificateRecord) -> str:
        return compute_digest(record)

    async def validate(self, digest: str) -> LedgerValidation:
        """
        Ask the ledger whether a digest is registered.

        Raises:
            CollaboratorUnavailable: If the ledger cannot be reached after retries
        """
        url = f"{self.base_url}{LEDGER_CERTIFICATE_PATH.format(digest=digest)}"
        self.logger.debug(f"{LOG_INPUT} GET {url}")

        retrying = retry(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type((aiohttp.ClientError, asyncio.TimeoutError)),
        )(self._make_request)

        try:
            result = await retrying(url)
        except RetryError as e:
            raise CollaboratorUnavailable(
                f"Ledger unavailable after {self.retry_attempts} attempts: {e.last_attempt.exception()}",
                collaborator='ledger',
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise CollaboratorUnavailable(f"Ledger request failed: {e}", collaborator='ledger') from e

        self.logger.debug(f"{LOG_OUTPUT} Ledger answered exists={result.exists}")
        return result

    async def _make_request(self, url: str) -> LedgerValidation:
        session = await self._get_session()

        try:
            self.logger.debug(f"{LOG_PROCESS} Making request to {url}")

            async with session.get(
                url,
                headers={'Accept': 'application/json'},
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:

                if response.status == HTTP_NOT_FOUND:
                    return LedgerValidation(exists=False)

                # Server errors are retryable
                if response.status in RETRYABLE_STATUS_CODES:
                    self.logger.warning(f"Ledger server error {response.status} - will retry")
                    raise aiohttp.ClientError(f"Server error: {response.status}")

                response.raise_for_status()

                data = await response.json()
                exists = bool(data.get('exists', True)) if isinstance(data, dict) else True
                payload = data if isinstance(data, dict) else {}
                return LedgerValidation(exists=exists, payload=payload)

        except asyncio.TimeoutError:
            self.logger.error(f"Ledger request timeout: {url}")
            raise

        except aiohttp.ClientError as e:
            self.logger.error(f"Ledger request failed: {e}")
            raise

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> 'HttpLedgerClient':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


__all__ = ['InMemoryLedger', 'HttpLedgerClient', 'LEDGER_CERTIFICATE_PATH']
