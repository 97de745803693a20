"""Tests for the background build and store publication."""

import pytest

from fleetindex.indexer.exceptions import DocumentError
from fleetindex.indexer.orchestrator import BuildOrchestrator, BuildState
from fleetindex.indexer.runner import run_build
from fleetindex.packages.ecs import EcsDictionary
from fleetindex.serving.query import QuerySurface
from fleetindex.serving.store import PublishedStore


@pytest.fixture
def broken_dir(tmp_path):
    """Checkout whose only package has a scalar where vars must be a list."""
    pkg = tmp_path / "broken" / "packages" / "broken_pkg"
    pkg.mkdir(parents=True)
    (pkg / "manifest.yml").write_text("name: broken_pkg\nvars: 5\n", encoding="utf-8")
    return tmp_path / "broken"


@pytest.fixture
def published():
    store = PublishedStore()
    yield store
    store.close()


class TestLifecycle:
    """IDLE -> BUILDING -> READY | FAILED"""

    def test_not_ready_before_first_publish(self, published):
        """Queries before any build finishes get an initializing reply."""
        result = QuerySurface(published).execute("SELECT 1")

        assert result.status == "initializing"
        assert "still initializing" in result.message

    def test_run_publishes(self, tmp_path, integrations_dir, published):
        """A successful build moves the file into place and publishes it."""
        db_path = tmp_path / "fleetpkg.db"
        orchestrator = BuildOrchestrator(integrations_dir, db_path, published)

        orchestrator.run()

        assert orchestrator.state is BuildState.READY
        assert orchestrator.package_count == 2
        assert db_path.is_file()
        assert not orchestrator.building_path.exists()
        result = QuerySurface(published).execute("SELECT name FROM integrations ORDER BY name")
        assert [r["name"] for r in result.rows] == ["minimal_pkg", "sample_pkg"]

    def test_background_start(self, tmp_path, integrations_dir, ecs_dir, published):
        """start() builds on a thread; wait() returns once it is done."""
        orchestrator = BuildOrchestrator(integrations_dir, tmp_path / "fleetpkg.db", published, EcsDictionary(ecs_dir))

        thread = orchestrator.start()

        assert orchestrator.wait(timeout=30)
        thread.join(timeout=5)
        assert orchestrator.state is BuildState.READY
        assert published.load() is not None

    def test_single_use(self, tmp_path, integrations_dir, published):
        """A build can only be started once."""
        orchestrator = BuildOrchestrator(integrations_dir, tmp_path / "fleetpkg.db", published)
        orchestrator.run()

        with pytest.raises(RuntimeError, match="already started"):
            orchestrator.start()


class TestFailure:
    """A failed build leaves what was served in place."""

    def test_failed_build_keeps_previous_store(self, tmp_path, integrations_dir, broken_dir, published):
        """The old store keeps serving and the old file is untouched."""
        db_path = tmp_path / "fleetpkg.db"
        BuildOrchestrator(integrations_dir, db_path, published).run()
        before = published.load()
        size_before = db_path.stat().st_size

        orchestrator = BuildOrchestrator(broken_dir, db_path, published)
        with pytest.raises(DocumentError):
            orchestrator.run()

        assert orchestrator.state is BuildState.FAILED
        assert isinstance(orchestrator.error, DocumentError)
        assert published.load() is before
        assert db_path.stat().st_size == size_before
        assert not orchestrator.building_path.exists()
        assert QuerySurface(published).execute("SELECT COUNT(*) AS n FROM integrations").rows == [{"n": 2}]

    def test_failed_first_build_stays_initializing(self, tmp_path, broken_dir, published):
        """Without a previous store, readers keep getting the not-ready reply."""
        orchestrator = BuildOrchestrator(broken_dir, tmp_path / "fleetpkg.db", published)
        orchestrator.start()
        orchestrator.wait(timeout=30)

        assert orchestrator.state is BuildState.FAILED
        assert QuerySurface(published).execute("SELECT 1").status == "initializing"

    def test_empty_checkout(self, tmp_path, published):
        """A checkout without packages fails the build."""
        orchestrator = BuildOrchestrator(tmp_path, tmp_path / "fleetpkg.db", published)

        with pytest.raises(DocumentError):
            orchestrator.run()


class TestRunBuild:
    """run_build()"""

    def test_counts(self, tmp_path, integrations_dir, ecs_dir):
        """The report carries package and per-table row counts."""
        result = run_build(integrations_dir, tmp_path / "fleetpkg.db", ecs_dir)

        assert result["success"] is True
        assert result["packages"] == 2
        assert result["counts"]["integrations"] == 2
        assert result["counts"]["ingest_pipelines"] == 2
        assert result["counts"]["ingest_processors"] == 9
        assert result["counts"]["sample_events"] == 1

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            run_build(tmp_path / "nope", tmp_path / "fleetpkg.db")
