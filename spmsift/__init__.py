"""Condensed Swift Package Manager reports and package lint checks."""

__version__ = "0.1.0"

__all__ = ["__version__"]
