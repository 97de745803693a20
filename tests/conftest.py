"""Pytest configuration and fixtures."""

import sqlite3
from pathlib import Path

import pytest

from fleetindex.indexer.database import DatabaseManager
from fleetindex.indexer.writer import write_packages
from fleetindex.packages.ecs import EcsDictionary
from fleetindex.packages.reader import discover_packages, read_package

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def integrations_dir():
    """Integrations checkout with two packages: minimal_pkg and sample_pkg."""
    return FIXTURES / "integrations"


@pytest.fixture
def sample_pkg_dir(integrations_dir):
    return integrations_dir / "packages" / "sample_pkg"


@pytest.fixture
def ecs_dir():
    """ECS dictionaries laid out as <ref>/ecs_flat.yml (only v8.17.0)."""
    return FIXTURES / "ecs"


@pytest.fixture
def built_db(tmp_path, integrations_dir, ecs_dir):
    """Store built from the fixture corpus; returns its path."""
    db_path = tmp_path / "fleetpkg.db"
    with DatabaseManager(db_path) as db:
        packages = (read_package(d) for d in discover_packages(integrations_dir))
        write_packages(db, packages, EcsDictionary(ecs_dir))
    return db_path


@pytest.fixture
def built_conn(built_db):
    """Read-only connection to built_db with name-addressable rows."""
    conn = sqlite3.connect(f"file:{built_db}?mode=ro", uri=True)
    conn.row_factory = sqlite3.Row
    yield conn
    conn.close()
