"""
Pure domain layer.

Value objects with NO dependencies on ORM, database or I/O.  The one
sanctioned time source is ``SystemClock``.
"""

from payroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payroll_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Guard",
    "Transition",
    "Workflow",
]
