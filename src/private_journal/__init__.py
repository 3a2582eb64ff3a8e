"""private-journal — scoped, date-partitioned journal with semantic search."""

__version__ = "0.1.0"
