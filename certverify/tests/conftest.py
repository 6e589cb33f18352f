# Path: certverify/tests/conftest.py
"""Shared pytest fixtures."""

import pytest

from certverify.engine import EngineSettings, VerificationOrchestrator
from certverify.loaders import InMemoryLedger
from certverify.tests.fixtures import (
    TODAY,
    create_candidate,
    create_environment,
    create_record,
    registered,
)


@pytest.fixture
def settings():
    return EngineSettings()


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def stored_record(ledger):
    """Clean record registered on the ledger."""
    return registered(create_record(), ledger)


@pytest.fixture
def candidate():
    return create_candidate()


@pytest.fixture
def repositories(stored_record):
    return create_environment(stored_record)


@pytest.fixture
def orchestrator(repositories, ledger, settings):
    records, institutions = repositories
    return VerificationOrchestrator(
        records,
        institutions,
        ledger,
        settings,
        today=lambda: TODAY,
    )
