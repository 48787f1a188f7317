"""
Payroll Kernel

Shared infrastructure for the payroll engine:
- Structured JSON logging with run-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clock and workflow value objects
- SQLAlchemy declarative base and engine/session helpers
"""

__version__ = "0.1.0"
