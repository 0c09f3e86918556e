"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("ENV", "test")

from school_portal.main import create_app  # noqa: E402


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """TestClient against a fresh application instance."""
    with TestClient(create_app()) as c:
        yield c


@pytest.fixture
def make_csv() -> Callable[..., str]:
    """Join a header and data lines into CSV text."""

    def _make(header: str, *rows: str) -> str:
        return "\n".join((header, *rows))

    return _make
