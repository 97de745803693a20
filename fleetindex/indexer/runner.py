"""Synchronous build workflow runner (used by the build command)."""

from pathlib import Path
from typing import Any

from fleetindex.packages.ecs import EcsDictionary
from fleetindex.serving.store import PublishedStore
from fleetindex.utils.logging import logger

from .orchestrator import BuildOrchestrator
from .schema import TABLES


def run_build(
    integrations_dir: str | Path,
    db_path: str | Path,
    ecs_dir: str | Path | None = None,
) -> dict[str, Any]:
    """Build the store in the foreground and report per-table row counts.

    Raises:
        FileNotFoundError: integrations_dir does not exist
        FleetIndexError: the build failed; db_path is left as it was
    """
    root = Path(integrations_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Integrations directory does not exist: {integrations_dir}")

    published = PublishedStore()
    orchestrator = BuildOrchestrator(root, db_path, published, EcsDictionary(ecs_dir))
    try:
        orchestrator.run()

        store = published.load()
        counts: dict[str, int] = {}
        for table in TABLES:
            _, rows = store.execute(f"SELECT COUNT(*) FROM {table}")
            counts[table] = rows[0][0]
    finally:
        published.close()

    logger.info(
        "Indexed {count} packages into {db} in {elapsed:.2f}s",
        count=orchestrator.package_count,
        db=str(db_path),
        elapsed=orchestrator.elapsed,
    )
    return {
        "success": True,
        "db_path": str(db_path),
        "packages": orchestrator.package_count,
        "elapsed": orchestrator.elapsed,
        "counts": counts,
    }
