"""Centralized constants for fleetindex.

Single source of truth for file names, directories and environment
variable names shared across modules.
"""

from pathlib import Path

# ============================================================================
# OUTPUT FILES
# ============================================================================

# Working directory for fleetindex artifacts (config, error log)
STATE_DIR = Path("./.fleetindex")

ERROR_LOG_FILE = STATE_DIR / "error.log"

# The store is rebuilt from scratch on every start
DEFAULT_DB_FILE = "fleetpkg.db"

# Suffix of the file a build writes before it is moved into place
BUILDING_SUFFIX = ".building"

# ============================================================================
# PACKAGE LAYOUT
# ============================================================================

PACKAGES_GLOB = "packages/*"
PACKAGE_MANIFEST = "manifest.yml"
CHANGELOG_FILE = "changelog.yml"
BUILD_MANIFEST = "_dev/build/build.yml"
DATA_STREAM_DIR = "data_stream"
TRANSFORM_DIR = "elasticsearch/transform"
INGEST_PIPELINE_DIR = "elasticsearch/ingest_pipeline"
SAMPLE_EVENT_FILE = "sample_event.json"

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_PREFIX = "FLEETINDEX"
ENV_LOG_LEVEL = "FLEETINDEX_LOG_LEVEL"
ENV_LOG_JSON = "FLEETINDEX_LOG_JSON"
ENV_LOG_FILE = "FLEETINDEX_LOG_FILE"
