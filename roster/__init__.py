"""Employee roster: salary-history records over a SQLite store."""

__version__ = "0.1.0"
