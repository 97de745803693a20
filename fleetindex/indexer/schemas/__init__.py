"""
Schema module: domain-split database schema definitions.

Each submodule defines the tables for one part of a Fleet package
(package root, policy templates, variables, data streams, transforms);
fleetindex.indexer.schema merges them into the TABLES registry.
"""

from .utils import Column, ForeignKey, TableSchema

__all__ = ["Column", "ForeignKey", "TableSchema"]
