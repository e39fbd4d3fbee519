"""Keeps a map line between two draggable endpoints in sync with a path service."""
