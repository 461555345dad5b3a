"""
Pure domain layer.

Value objects and pure functions with NO dependencies on I/O.  The only
sanctioned source of "today" is an injected ``Clock``.
"""

from invoice_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from invoice_kernel.domain.workflow import Guard, Transition, Workflow, next_state

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Guard",
    "Transition",
    "Workflow",
    "next_state",
]
