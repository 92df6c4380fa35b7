"""Command line interface for constructions."""
