"""fleetindex - Fleet integration package metadata as a queryable SQLite store."""

__version__ = "0.4.0"
