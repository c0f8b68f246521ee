"""Command-line interface for sketchctl."""
