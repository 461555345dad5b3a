"""
Invoice Modules.

Domain modules built on the Invoice Kernel.  Each module contains:
- Domain models (the nouns)
- Workflows (state machines)
- Configuration schemas (policy and settings)
- A stateless service facade
"""
