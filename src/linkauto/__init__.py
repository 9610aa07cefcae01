"""linkauto: turn the first mention of each defined term into a link."""

__version__ = "0.1.0"
