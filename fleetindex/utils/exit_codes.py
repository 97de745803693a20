"""Centralized exit codes for the fleetindex CLI."""


class ExitCodes:
    """Exit codes fleetindex sets itself; click uses 1 and 2 for errors and usage."""

    BUILD_FAILED = 3
