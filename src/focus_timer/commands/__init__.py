"""Command modules for focus-timer."""
