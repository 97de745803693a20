"""Field catalog parsing and flattening.

Field files nest definitions through `fields:` lists under group entries.
flatten_fields walks that tree depth first and returns one Field per leaf,
named by its dotted path. Pure `type: group` containers are not emitted.
"""

import json
from pathlib import Path
from typing import Any

from fleetindex.indexer.exceptions import DocumentError

from .loader import LocatedDict, location_of
from .model import Field


def as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def as_bool(value: Any) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return bool(value)


def as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def as_str_list(value: Any) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, list):
        return [as_text(v) for v in value]
    return [as_text(value)]


def _make_field(raw: LocatedDict, name: str, yaml_path: str, path: Path) -> Field:
    copy_to = raw.get("copy_to")
    if isinstance(copy_to, list):
        copy_to = ",".join(as_text(v) for v in copy_to)

    return Field(
        name=name,
        location=location_of(raw, path),
        type=as_text(raw.get("type")),
        description=as_text(raw.get("description")),
        value=raw.get("value"),
        example=raw.get("example"),
        pattern=as_text(raw.get("pattern")),
        date_format=as_text(raw.get("date_format")),
        analyzer=as_text(raw.get("analyzer")),
        search_analyzer=as_text(raw.get("search_analyzer")),
        ignore_above=as_int(raw.get("ignore_above")),
        multi_fields=raw.get("multi_fields"),
        enabled=as_bool(raw.get("enabled")),
        dynamic=as_text(raw.get("dynamic")),
        index=as_bool(raw.get("index")),
        doc_values=as_bool(raw.get("doc_values")),
        copy_to=as_text(copy_to),
        scaling_factor=as_int(raw.get("scaling_factor")),
        alias_target_path=as_text(raw.get("path")),
        normalize=as_str_list(raw.get("normalize")),
        normalizer=as_text(raw.get("normalizer")),
        null_value=raw.get("null_value"),
        dimension=as_bool(raw.get("dimension")),
        metric_type=as_text(raw.get("metric_type")),
        unit=as_text(raw.get("unit")),
        external=as_text(raw.get("external")),
        yaml_path=yaml_path,
    )


def _walk(nodes: Any, prefix: str, yaml_path: str, path: Path, out: list[Field]) -> None:
    if nodes is None:
        return
    if not isinstance(nodes, list):
        raise DocumentError(f"{path}: expected a list of fields at {yaml_path or '$'}")

    for i, raw in enumerate(nodes):
        node_path = f"{yaml_path}[{i}]" if yaml_path else f"$[{i}]"
        if not isinstance(raw, dict):
            raise DocumentError(f"{path}: field entry {node_path} is not a mapping")

        name = as_text(raw.get("name"))
        if not name:
            raise DocumentError(f"{path}: field entry {node_path} has no name")
        full_name = f"{prefix}.{name}" if prefix else name

        children = raw.get("fields")
        field_type = as_text(raw.get("type"))
        if not children:
            if field_type != "group":
                out.append(_make_field(raw, full_name, node_path, path))
            continue

        # Typed containers (object, nested) are real mappings; groups are not.
        if field_type not in ("", "group"):
            out.append(_make_field(raw, full_name, node_path, path))
        _walk(children, full_name, f"{node_path}.fields", path, out)


def flatten_fields(raw_fields: Any, path: Path) -> list[Field]:
    """Flatten one fields file's top-level list into dotted leaf fields."""
    out: list[Field] = []
    _walk(raw_fields, "", "", path, out)
    return out
