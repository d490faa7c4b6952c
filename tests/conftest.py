"""
Shared pytest fixtures

Logging is configured before any coronadb module is imported, so tests never
write log files.
"""
import os
import sys
import tempfile
from pathlib import Path

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="coronadb-logs-"))

import pytest
from loguru import logger

from coronadb.core import IngestSettings, get_config, setup_logging
from coronadb.storage import CovidDatabase

FIXTURES = Path(__file__).parent / "fixtures"


# ============================================================================
# Session
# ============================================================================

@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Keep test output quiet

    Only warnings and errors reach stderr, no file sinks are installed.
    """
    setup_logging()
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


# ============================================================================
# Inputs
# ============================================================================

@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def ingest_settings() -> IngestSettings:
    """Default ingestion settings, independent of the environment"""
    return IngestSettings()


@pytest.fixture
def write_csv(tmp_path):
    """
    Factory writing CSV text to a temporary file

    Usage:
        path = write_csv("a,b\\n1,2\\n", name="input.csv")
    """
    def _write(content: str, name: str = "input.csv", encoding: str = "utf-8") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding=encoding)
        return path

    return _write


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def db_path(tmp_path) -> Path:
    return tmp_path / "corona.db"


@pytest.fixture
def covid_db(db_path):
    """New empty database"""
    db = CovidDatabase.create(db_path)
    yield db
    db.close()


@pytest.fixture
def clear_config_cache():
    """Reload settings before and after a test that changes the environment"""
    get_config.cache_clear()
    yield
    get_config.cache_clear()
