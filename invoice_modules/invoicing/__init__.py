"""
Invoicing Module (``invoice_modules.invoicing``).

Responsibility
--------------
Invoice lifecycle and payment-terms engine: draft -> ready for approval ->
approved / rejected, explicit payment terms per invoice variant, discount
calculation, and batch approval that reports every outcome as data.

Architecture position
---------------------
**Modules layer** -- value models, a declarative workflow, two invoice
variants behind one protocol, a configuration schema, and a stateless
service facade.

Invariants enforced
-------------------
* Variants are substitutable: same operations, same result shape, no
  variant-specific exceptions.
* ``discount_date <= due_date`` for every ``PaymentTerms`` produced.
* Batch approval never aborts and never drops an invoice.

Failure modes
-------------
* ``InvoiceResult.success == False`` -- wrong state, invalid amount,
  missing purchase order, or purchase-order amount mismatch.  Caller
  inspects ``error_code``.
* ``InvoiceInputError`` subclasses -- malformed construction arguments.
"""

from invoice_modules.invoicing.config import InvoicingConfig
from invoice_modules.invoicing.documents import (
    InvoiceDocument,
    PurchaseOrderInvoice,
    StandardInvoice,
)
from invoice_modules.invoicing.models import (
    PURCHASE_ORDER_TERMS,
    STANDARD_TERMS,
    InvoiceErrorCode,
    InvoiceResult,
    InvoiceState,
    PaymentTerms,
    PurchaseOrder,
    TermsPolicy,
)
from invoice_modules.invoicing.service import (
    AgingLine,
    BatchApprovalResult,
    BatchFailure,
    DiscountReminder,
    InvoiceService,
)
from invoice_modules.invoicing.workflows import INVOICE_WORKFLOW

__all__ = [
    "InvoiceDocument",
    "StandardInvoice",
    "PurchaseOrderInvoice",
    "InvoiceErrorCode",
    "InvoiceResult",
    "InvoiceState",
    "PaymentTerms",
    "PurchaseOrder",
    "TermsPolicy",
    "STANDARD_TERMS",
    "PURCHASE_ORDER_TERMS",
    "InvoiceService",
    "BatchApprovalResult",
    "BatchFailure",
    "AgingLine",
    "DiscountReminder",
    "InvoicingConfig",
    "INVOICE_WORKFLOW",
]
