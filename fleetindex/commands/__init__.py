"""Command implementations for the fleetindex CLI."""
