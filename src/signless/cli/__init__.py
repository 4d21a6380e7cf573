"""Command-line interface for signless."""
