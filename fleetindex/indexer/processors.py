"""Ingest processor tree flattening.

An ingest pipeline is a list of processors, and any processor may carry an
`on_failure` list of processors, recursively. flatten_processors turns such
a tree into an ordered list of FlatProcessor records addressed by JSON
Pointer style locators:

    /processors/<index>/<type>
    /processors/<index>/<type>/on_failure/<index>/<type>
    /on_failure/<index>/<type>

Ordering is children first: a processor's on_failure records precede the
processor's own record. Null list entries are skipped but keep their index,
so locators always match the position in the source list.
"""

import json
from dataclasses import dataclass
from typing import Any

from fleetindex.packages.model import Processor

from .exceptions import ProcessorFlattenError

ON_FAILURE_KEY = "on_failure"


@dataclass(frozen=True)
class FlatProcessor:
    """A processor lifted out of its tree, with a locator and origin."""

    type: str
    attributes: dict[str, Any]
    json_pointer: str
    file_path: str
    line: int
    column: int

    def marshal_attributes(self) -> str | None:
        """Attributes as JSON text, or None when there are none.

        Raises:
            ProcessorFlattenError: the attributes are not JSON serializable
        """
        if not self.attributes:
            return None
        return _dump(self.attributes, self.json_pointer)


def _dump(value: Any, json_pointer: str) -> str:
    try:
        return json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise ProcessorFlattenError(
            f"processor at {json_pointer} has attributes that cannot be encoded as JSON: {e}",
            json_pointer,
        ) from e


def _failure_summary(branch: list[Processor | None]) -> list[dict[str, Any]]:
    return [{child.type: child.attributes} for child in branch if child is not None]


def flatten_processors(processors: list[Processor | None], base: str) -> list[FlatProcessor]:
    """Flatten a processor list rooted at base ('/processors' or '/on_failure').

    Raises:
        ProcessorFlattenError: a processor's attributes are not JSON serializable;
            nothing is returned for the whole tree in that case
    """
    result: list[FlatProcessor] = []

    for i, proc in enumerate(processors):
        if proc is None:
            continue

        json_pointer = f"{base}/{i}/{proc.type}"
        attrs = dict(proc.attributes)

        if proc.on_failure:
            result.extend(flatten_processors(proc.on_failure, f"{json_pointer}/{ON_FAILURE_KEY}"))
            attrs[ON_FAILURE_KEY] = _failure_summary(proc.on_failure)

        flat = FlatProcessor(
            type=proc.type,
            attributes=attrs,
            json_pointer=json_pointer,
            file_path=proc.location.file_path,
            line=proc.location.line,
            column=proc.location.column,
        )
        # Serialize eagerly so a bad node fails the whole flatten.
        flat.marshal_attributes()
        result.append(flat)

    return result


def flatten_pipeline(processors: list[Processor | None], on_failure: list[Processor | None]) -> list[FlatProcessor]:
    """Flatten a pipeline body followed by its pipeline-level on_failure branch."""
    flat = flatten_processors(processors, "/processors")
    if on_failure:
        flat.extend(flatten_processors(on_failure, f"/{ON_FAILURE_KEY}"))
    return flat
