"""Targeting hook registry for persistent-world game servers."""

__version__ = "0.1.0"
