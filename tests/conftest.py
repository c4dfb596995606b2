"""Shared pytest fixtures for Platzhalter tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from platzhalter.api.main import create_app
from platzhalter.core.config import PlatzhalterConfig
from platzhalter.core.image_cache import ImageCache


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> PlatzhalterConfig:
    """Create a test configuration whose image store lives in a temp directory.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        PlatzhalterConfig instance for testing
    """
    return PlatzhalterConfig(
        _env_file=None,
        db_dir=str(temp_dir / "db"),
        log_level="DEBUG",
    )


@pytest.fixture
def image_cache(temp_dir: Path) -> ImageCache:
    """Create an empty image cache in a temp directory."""
    return ImageCache(temp_dir / "cache" / "images.sqlite3")


@pytest.fixture
def test_client(test_config: PlatzhalterConfig) -> Generator[TestClient, None, None]:
    """Create a TestClient whose lifespan has opened the image store.

    Yields:
        TestClient bound to a fresh application
    """
    app = create_app(test_config)
    with TestClient(app) as client:
        yield client
