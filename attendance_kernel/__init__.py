"""
Attendance Kernel

Shared foundation for the attendance reconciliation engine:
- Immutable punch events and daily attendance records
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging with batch-scoped context
"""

__version__ = "0.1.0"
