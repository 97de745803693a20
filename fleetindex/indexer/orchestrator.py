"""Background build of the package store and its publication.

BuildOrchestrator is a one-shot state machine:

    IDLE -> BUILDING -> READY | FAILED

start() moves it to BUILDING and runs the build on a daemon thread. The
build writes a fresh `<db>.building` file; only when every package has been
written is that file moved over `<db>`, reopened read-only and published.
Any failure removes the partial file and leaves the published reference as
it was. There is no retry.
"""

import enum
import os
import threading
import time
from pathlib import Path

from fleetindex.packages.ecs import EcsDictionary
from fleetindex.packages.reader import discover_packages, read_package
from fleetindex.serving.store import PublishedStore, ReadOnlyStore
from fleetindex.utils.constants import BUILDING_SUFFIX
from fleetindex.utils.logging import logger

from .database import DatabaseManager
from .writer import write_packages


class BuildState(enum.Enum):
    IDLE = "idle"
    BUILDING = "building"
    READY = "ready"
    FAILED = "failed"


class BuildOrchestrator:
    """Builds the store for one integrations checkout and publishes it."""

    def __init__(
        self,
        integrations_dir: Path | str,
        db_path: Path | str,
        published: PublishedStore,
        ecs: EcsDictionary | None = None,
    ):
        self.integrations_dir = Path(integrations_dir)
        self.db_path = Path(db_path)
        self.published = published
        self.ecs = ecs or EcsDictionary()

        self.state = BuildState.IDLE
        self.error: BaseException | None = None
        self.package_count = 0
        self.elapsed = 0.0

        self._lock = threading.Lock()
        self._done = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def building_path(self) -> Path:
        return self.db_path.with_name(self.db_path.name + BUILDING_SUFFIX)

    def _enter_building(self) -> None:
        with self._lock:
            if self.state is not BuildState.IDLE:
                raise RuntimeError(f"build already started (state={self.state.value})")
            self.state = BuildState.BUILDING

    def start(self) -> threading.Thread:
        """Start the build on a daemon thread. May be called once."""
        self._enter_building()
        self._thread = threading.Thread(target=self._run_guarded, name="fleetindex-build", daemon=True)
        self._thread.start()
        return self._thread

    def run(self) -> None:
        """Run the build on the calling thread.

        Raises:
            FleetIndexError: the build failed (also kept on self.error)
        """
        self._enter_building()
        self._run_guarded()
        if self.error is not None:
            raise self.error

    def wait(self, timeout: float | None = None) -> bool:
        """Block until READY or FAILED; False if timeout expired first."""
        return self._done.wait(timeout)

    def _run_guarded(self) -> None:
        started = time.monotonic()
        try:
            self._build()
        except Exception as e:
            self.error = e
            self.state = BuildState.FAILED
            self._discard_partial()
            logger.opt(exception=True).error("Build failed: {err}", err=str(e))
        else:
            self.state = BuildState.READY
        finally:
            self.elapsed = time.monotonic() - started
            self._done.set()

    def _build(self) -> None:
        pkg_dirs = discover_packages(self.integrations_dir)
        logger.info(
            "Building {db} from {count} packages in {dir}",
            db=str(self.db_path),
            count=len(pkg_dirs),
            dir=str(self.integrations_dir),
        )

        tmp = self.building_path
        tmp.parent.mkdir(parents=True, exist_ok=True)
        if tmp.exists():
            tmp.unlink()

        db = DatabaseManager(tmp)
        try:
            self.package_count = write_packages(db, (read_package(d) for d in pkg_dirs), self.ecs)
        finally:
            db.close()

        os.replace(tmp, self.db_path)
        self.published.publish(ReadOnlyStore(self.db_path))
        logger.info("Build complete: {count} packages", count=self.package_count)

    def _discard_partial(self) -> None:
        tmp = self.building_path
        try:
            tmp.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove partial store {path}: {err}", path=str(tmp), err=e)
