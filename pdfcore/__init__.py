"""Low-level PDF objects, lexing, parsing, dates, paths and cross-reference handling."""

__version__ = "0.9.0"