"""Global pytest configuration for hermetic test runs."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "idl"


def pytest_sessionstart(session):  # noqa: ARG001
    # Never write telemetry from tests unless a test opts in explicitly.
    os.environ.setdefault("MIDLFMT_TELEMETRY", "0")


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


def read_fixture(name: str) -> str:
    """Read a fixture without translating its line endings."""
    return (FIXTURES_DIR / name).read_bytes().decode("utf-8")


@pytest.fixture
def fixture_text():
    """Reader for fixture files by name."""
    return read_fixture
