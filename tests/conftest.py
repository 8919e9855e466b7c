"""Shared test configuration and fixtures."""

from collections.abc import Iterator

import pytest
from fakes import FakeQueryClient

import fate_pools.core.config as config_module


@pytest.fixture
def fake_client() -> FakeQueryClient:
    """Provide an empty in-memory query client."""
    return FakeQueryClient()


@pytest.fixture(autouse=True)
def _reset_config_singleton() -> Iterator[None]:  # pyright: ignore[reportUnusedFunction]
    """Drop the cached global config so each test sees its own environment."""
    config_module._config = None
    yield
    config_module._config = None
