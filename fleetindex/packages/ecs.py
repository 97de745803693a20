"""Resolution of `external: ecs` fields against ECS flat field dictionaries.

The dictionary for a reference (for example `v8.17.0`) is read from
`<ecs_dir>/<reference>/ecs_flat.yml`, the file the ECS repository publishes
under generated/ecs/. Each dictionary is loaded once and cached.
"""

import threading
from dataclasses import dataclass
from pathlib import Path

import yaml

from fleetindex.utils.logging import logger

ECS_FLAT_FILE = "ecs_flat.yml"


@dataclass(frozen=True)
class EcsField:
    """The subset of an ECS field definition used to backfill local fields."""

    name: str
    data_type: str = ""
    pattern: str = ""
    description: str = ""
    array: bool = False


class EcsDictionary:
    """Lookup of ECS field definitions by (field name, ECS reference)."""

    def __init__(self, ecs_dir: Path | str | None = None):
        self.ecs_dir = Path(ecs_dir) if ecs_dir else None
        self._cache: dict[str, dict[str, EcsField]] = {}
        self._lock = threading.Lock()

    def lookup(self, name: str, reference: str) -> EcsField | None:
        """Return the ECS definition of name, or None when it cannot be resolved."""
        if not reference:
            return None
        return self._load(reference.removeprefix("git@")).get(name)

    def _load(self, reference: str) -> dict[str, EcsField]:
        with self._lock:
            if reference in self._cache:
                return self._cache[reference]

            fields: dict[str, EcsField] = {}
            if self.ecs_dir is None:
                logger.debug("No ECS directory configured; ECS reference {ref} is unresolvable", ref=reference)
            else:
                fields = self._read(self.ecs_dir / reference / ECS_FLAT_FILE, reference)

            self._cache[reference] = fields
            return fields

    @staticmethod
    def _read(path: Path, reference: str) -> dict[str, EcsField]:
        if not path.is_file():
            logger.warning("ECS dictionary for {ref} not found at {path}", ref=reference, path=str(path))
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Could not load ECS dictionary {path}: {err}", path=str(path), err=e)
            return {}

        if not isinstance(raw, dict):
            logger.warning(
                "ECS dictionary {path} is a {kind}, expected a mapping of field names",
                path=str(path),
                kind=type(raw).__name__,
            )
            return {}

        fields = {}
        for name, definition in raw.items():
            if not isinstance(definition, dict):
                continue
            normalize = definition.get("normalize") or []
            fields[name] = EcsField(
                name=name,
                data_type=str(definition.get("type") or ""),
                pattern=str(definition.get("pattern") or ""),
                description=str(definition.get("description") or ""),
                array="array" in normalize,
            )
        logger.info("Loaded {count} ECS fields for {ref}", count=len(fields), ref=reference)
        return fields
