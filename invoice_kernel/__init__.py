"""
Invoice Kernel

Shared infrastructure for the invoice lifecycle engine:
- Structured JSON logging with context propagation
- Typed input-error exceptions with machine-readable codes
- Pure workflow value types and the transition function
- Injectable clock for date-dependent reports
"""

__version__ = "0.1.0"
