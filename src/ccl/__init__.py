"""Commerce Control List structural parser."""

__version__ = "0.1.0"
