"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Ensure courseaccess_backend is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from courseaccess_backend.context import build_services
from courseaccess_backend.permissions.principal import Principal
from courseaccess_backend.tests.fixtures import RecordingEventSink, memory_cache


@pytest.fixture
def durable_backend():
    """In-memory aiocache backend for the durable store"""
    return memory_cache()


@pytest.fixture
def ephemeral_backend():
    """In-memory aiocache backend for the ephemeral cache"""
    return memory_cache()


@pytest.fixture
def events():
    return RecordingEventSink()


@pytest.fixture
def services(durable_backend, ephemeral_backend, events):
    """Full service graph over in-memory backends, no durable expiry."""
    return build_services(
        durable_backend=durable_backend,
        ephemeral_backend=ephemeral_backend,
        events=events,
        durable_ttl=0,
        ephemeral_ttl=900,
    )


@pytest.fixture
def alice():
    return Principal.authenticated_as("alice")


@pytest.fixture
def bob():
    return Principal.authenticated_as("bob")


@pytest.fixture
def anonymous():
    return Principal.anonymous()
