"""Infinite NASA photo feed backed by a rotating image search."""

__version__ = "1.0.0"
