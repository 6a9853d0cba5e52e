"""Deterministic shuffling and sampling of newline-delimited record streams."""

__version__ = "0.1.1"