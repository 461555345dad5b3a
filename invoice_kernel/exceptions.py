"""
Typed Exception Hierarchy for the Invoice Kernel.

===============================================================================
WHAT RAISES AND WHAT RETURNS
===============================================================================

The invoice engine has two failure channels and never mixes them:

  - Business-rule outcomes (wrong state, invalid amount, purchase-order
    mismatch) are RETURNED as ``InvoiceResult`` values.  Nothing in this
    module is raised for them.
  - Input errors (malformed construction arguments, a missing required
    collaborator, an inconsistent terms policy, a broken configuration
    document) are RAISED immediately, using the classes below.

Every exception carries a class-level ``code`` (machine-readable) and its
context as attributes (structured, survives logging and serialization):

    try:
        StandardInvoice("", Decimal("100"), date(2025, 1, 15))
    except InvalidInvoiceError as e:
        log.warning("rejected", extra={"code": e.code, "field": e.field})

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InvoiceKernelError (base)
    |
    +-- InvoiceInputError (also ValueError)
    |   +-- InvalidInvoiceError
    |   +-- MissingPurchaseOrderError
    |   +-- InvalidPurchaseOrderError
    |   +-- InvalidPaymentTermsError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                      | When Raised
--------------------------|---------------------------------------------------
INVALID_INVOICE           | Blank invoice number, non-date invoice date,
                          | float or non-numeric amount
MISSING_PURCHASE_ORDER    | attach_purchase_order(None)
INVALID_PURCHASE_ORDER    | Purchase order with empty number or negative total
INVALID_PAYMENT_TERMS     | Negative days, discount days > net days,
                          | discount percentage outside [0, 100]
CONFIGURATION_ERROR       | Configuration document does not fit the schema
===============================================================================
"""


class InvoiceKernelError(Exception):
    """
    Base exception for all invoice kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "INVOICE_KERNEL_ERROR"


class InvoiceInputError(InvoiceKernelError, ValueError):
    """Base exception for malformed construction or attach-time input."""

    code: str = "INVOICE_INPUT_ERROR"


class InvalidInvoiceError(InvoiceInputError):
    """An invoice was constructed with an invalid argument."""

    code: str = "INVALID_INVOICE"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid invoice {field}: {reason}")


class MissingPurchaseOrderError(InvoiceInputError):
    """A purchase order was required but none was supplied."""

    code: str = "MISSING_PURCHASE_ORDER"

    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(
            f"Invoice {invoice_number} requires a purchase order; got None"
        )


class InvalidPurchaseOrderError(InvoiceInputError):
    """A purchase order value violates its own constraints."""

    code: str = "INVALID_PURCHASE_ORDER"

    def __init__(self, number: str, reason: str):
        self.number = number
        self.reason = reason
        super().__init__(f"Invalid purchase order {number!r}: {reason}")


class InvalidPaymentTermsError(InvoiceInputError):
    """A terms policy or payment terms value is internally inconsistent."""

    code: str = "INVALID_PAYMENT_TERMS"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid payment terms: {reason}")


class ConfigurationError(InvoiceKernelError):
    """A configuration document could not be turned into a valid config."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid configuration in {source}: {reason}")
