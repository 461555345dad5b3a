"""
Invoice Configuration (``invoice_config``).

YAML loading for ``InvoicingConfig``.  The single public entry point is
``load_invoicing_config(path)``.
"""

from invoice_config.loader import load_invoicing_config

__all__ = ["load_invoicing_config"]
