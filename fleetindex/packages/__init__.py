"""Reading Fleet integration packages into typed, location-aware models."""

from .ecs import EcsDictionary, EcsField
from .loader import LocatedDict, load_yaml
from .reader import discover_packages, read_package

__all__ = [
    "EcsDictionary",
    "EcsField",
    "LocatedDict",
    "discover_packages",
    "load_yaml",
    "read_package",
]
