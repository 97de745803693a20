"""YAML/JSON loading with source locations.

Every mapping in a loaded document is a LocatedDict that remembers the file
it came from and the 1-based line and column where it starts. Timestamps are
left as strings so every scalar stays JSON serializable.
"""

from pathlib import Path
from typing import Any

import yaml

from fleetindex.indexer.exceptions import DocumentError

from .model import Location

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class LocatedDict(dict):
    """dict that carries the location of the YAML mapping it was built from."""

    file_path: str = ""
    line: int = 0
    column: int = 0

    @property
    def location(self) -> Location:
        return Location(self.file_path, self.line, self.column)


class LocatingLoader(yaml.SafeLoader):
    """SafeLoader producing LocatedDict mappings and no datetime objects."""


LocatingLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _construct_located_map(loader: LocatingLoader, node: yaml.MappingNode):
    data = LocatedDict()
    data.file_path = node.start_mark.name
    data.line = node.start_mark.line + 1
    data.column = node.start_mark.column + 1
    yield data
    data.update(loader.construct_mapping(node))


LocatingLoader.add_constructor("tag:yaml.org,2002:map", _construct_located_map)


def load_yaml(path: Path) -> Any:
    """Parse a YAML or JSON file.

    JSON may be indented with tabs, which YAML forbids. Raw tabs cannot
    occur inside JSON strings, so in .json files they are replaced by
    spaces before parsing.

    Raises:
        DocumentError: the file cannot be read or is not valid YAML
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentError(f"cannot read {path}: {e}", {"file": str(path)}) from e

    if path.suffix == ".json":
        text = text.replace("\t", " ")

    loader = LocatingLoader(text)
    loader.name = str(path)
    try:
        return loader.get_single_data()
    except yaml.YAMLError as e:
        raise DocumentError(f"malformed document {path}: {e}", {"file": str(path)}) from e
    finally:
        loader.dispose()


def location_of(node: Any, fallback: Path) -> Location:
    """Location of a loaded node, or the file itself for scalars and lists."""
    if isinstance(node, LocatedDict):
        return node.location
    return Location(str(fallback))
