"""
attendance_ingestion -- Raw terminal exports into normalized punch events.

Checks the shape of an exported table, parses its date/time cells and turns
each row into an ``Event``.  Row-level problems are collected as
``RowParseError`` values; only a table that is not raw attendance data at
all raises.

Architecture:
    attendance_ingestion/ is a top-level package.  Nothing in kernel/ or
    engines/ imports from ingestion.
"""
