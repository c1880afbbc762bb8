"""Shared pytest fixtures for rewire tests."""

import pytest

from rewire.lock_mode import LockMode
from rewire.resolver import Resolver
from rewire.signatures import InspectSignatureProvider
from tests.fixtures import EngineInterface, V8Engine


@pytest.fixture()
def resolver() -> Resolver:
    """Empty resolver with default sharing and thread locking."""
    return Resolver()


@pytest.fixture()
def resolver_v8() -> Resolver:
    """Resolver with the engine interface aliased to ``V8Engine``."""
    return Resolver(aliases={EngineInterface: V8Engine})


@pytest.fixture()
def resolver_unlocked() -> Resolver:
    """Resolver without table locking."""
    return Resolver(lock_mode=LockMode.NONE)


@pytest.fixture()
def signature_provider() -> InspectSignatureProvider:
    """InspectSignatureProvider instance."""
    return InspectSignatureProvider()


def pytest_configure(config: pytest.Config) -> None:
    # Source checkouts run without the installed pytest11 entry point.
    if not config.pluginmanager.has_plugin("rewire"):
        config.pluginmanager.import_plugin("rewire.integrations.pytest_plugin.plugin")
