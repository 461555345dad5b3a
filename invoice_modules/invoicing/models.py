"""
Invoicing Domain Models (``invoice_modules.invoicing.models``).

Responsibility
--------------
Frozen value objects for the invoice engine: invoice states, error codes,
purchase orders, payment terms and the terms policies that produce them,
and ``InvoiceResult`` -- the outcome of every state-changing operation.

Architecture position
---------------------
**Modules layer** -- pure data definitions.  No I/O.  These objects flow
*out of* invoice documents and ``InvoiceService`` as immutable snapshots.

Invariants enforced
-------------------
* All monetary fields use ``Decimal`` (never ``float``).
* All dataclasses are ``frozen=True`` -- immutable after construction.
* ``PaymentTerms``: ``discount_date <= due_date``, ``0 <= discount_percentage
  <= 100``, ``0 <= discount_days <= net_days``.
* ``InvoiceResult``: a success carries no error fields; a failure carries a
  code and a message.

Failure modes
-------------
* ``InvalidPaymentTermsError`` / ``InvalidPurchaseOrderError`` raised in
  ``__post_init__`` when construction arguments are inconsistent.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from invoice_kernel.exceptions import (
    InvalidPaymentTermsError,
    InvalidPurchaseOrderError,
)
from invoice_kernel.logging_config import get_logger

logger = get_logger("modules.invoicing.models")

HUNDRED = Decimal("100")


class InvoiceState(str, Enum):
    """Invoice workflow states.  Must align with ``workflows.INVOICE_WORKFLOW.states``."""
    DRAFT = "draft"
    READY_FOR_APPROVAL = "ready_for_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class InvoiceErrorCode(str, Enum):
    """Stable codes carried by failed ``InvoiceResult`` values."""
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_STATE = "INVALID_STATE"
    PO_AMOUNT_MISMATCH = "PO_AMOUNT_MISMATCH"
    PO_NOT_ATTACHED = "PO_NOT_ATTACHED"
    UNHANDLED_EXCEPTION = "UNHANDLED_EXCEPTION"  # batch-only, see InvoiceService


@dataclass(frozen=True)
class PurchaseOrder:
    """Pre-authorized spending record an invoice may be matched against.

    Contract: frozen, immutable after construction.
    Guarantees: ``number`` non-empty, ``total_amount >= 0``.
    Non-goals: creation workflow, line items, receipts.
    """
    number: str
    total_amount: Decimal
    vendor: str
    approved_date: date

    def __post_init__(self):
        if not isinstance(self.number, str) or not self.number.strip():
            raise InvalidPurchaseOrderError(self.number, "number cannot be empty")
        try:
            total = to_decimal(self.total_amount)
        except (TypeError, ValueError, InvalidOperation) as exc:
            raise InvalidPurchaseOrderError(self.number, f"total_amount: {exc}") from exc
        object.__setattr__(self, "total_amount", total)
        if self.total_amount < 0:
            raise InvalidPurchaseOrderError(self.number, "total_amount cannot be negative")
        if not isinstance(self.approved_date, date):
            raise InvalidPurchaseOrderError(
                self.number,
                f"approved_date must be a date, got {type(self.approved_date).__name__}",
            )
        logger.debug(
            "purchase_order_created",
            extra={
                "purchase_order_number": self.number,
                "vendor": self.vendor,
                "total_amount": str(self.total_amount),
                "approved_date": self.approved_date.isoformat(),
            },
        )


@dataclass(frozen=True)
class PaymentTerms:
    """Due date, discount deadline and discount rate for one invoice.

    Derived, never stored: documents rebuild it from their anchor date on
    every ``get_payment_terms()`` call.
    """
    due_date: date
    discount_date: date
    discount_percentage: Decimal
    net_days: int
    discount_days: int

    def __post_init__(self):
        if not self.discount_percentage.is_finite():
            raise InvalidPaymentTermsError("discount_percentage must be finite")
        if self.net_days < 0 or self.discount_days < 0:
            raise InvalidPaymentTermsError("days cannot be negative")
        if self.discount_days > self.net_days:
            raise InvalidPaymentTermsError(
                f"discount_days ({self.discount_days}) cannot exceed net_days ({self.net_days})"
            )
        if not (0 <= self.discount_percentage <= HUNDRED):
            raise InvalidPaymentTermsError(
                f"discount_percentage {self.discount_percentage} outside [0, 100]"
            )
        if self.discount_date > self.due_date:
            raise InvalidPaymentTermsError(
                f"discount_date {self.discount_date} is after due_date {self.due_date}"
            )

    def discounted_amount(self, amount: Decimal, payment_date: date) -> Decimal:
        """Amount payable on ``payment_date`` under these terms.

        The discount applies up to and including ``discount_date``.
        """
        if payment_date <= self.discount_date:
            return amount * (1 - self.discount_percentage / HUNDRED)
        return amount

    def days_past_due(self, as_of: date) -> int:
        """Days ``as_of`` is past ``due_date``; negative when not yet due."""
        return (as_of - self.due_date).days


@dataclass(frozen=True)
class TermsPolicy:
    """A named payment-terms rule: pay net ``net_days``, discount within
    ``discount_days``.

    Contract: frozen; validated at construction.
    """
    net_days: int
    discount_days: int
    discount_percentage: Decimal

    def __post_init__(self):
        try:
            percentage = to_decimal(self.discount_percentage)
        except (TypeError, ValueError, InvalidOperation) as exc:
            raise InvalidPaymentTermsError(f"discount_percentage: {exc}") from exc
        object.__setattr__(self, "discount_percentage", percentage)
        if self.net_days < 0 or self.discount_days < 0:
            raise InvalidPaymentTermsError("days cannot be negative")
        if self.discount_days > self.net_days:
            raise InvalidPaymentTermsError(
                f"discount_days ({self.discount_days}) cannot exceed net_days ({self.net_days})"
            )
        if not (0 <= self.discount_percentage <= HUNDRED):
            raise InvalidPaymentTermsError(
                f"discount_percentage {self.discount_percentage} outside [0, 100]"
            )

    def terms_from(self, anchor: date) -> PaymentTerms:
        return PaymentTerms(
            due_date=anchor + timedelta(days=self.net_days),
            discount_date=anchor + timedelta(days=self.discount_days),
            discount_percentage=self.discount_percentage,
            net_days=self.net_days,
            discount_days=self.discount_days,
        )


def to_decimal(value: Decimal | int | str) -> Decimal:
    """Coerce a monetary value to a finite ``Decimal``.

    Raises:
        TypeError: ``value`` is a float or bool.
        ValueError: ``value`` is NaN or infinite.
        decimal.InvalidOperation: ``value`` is not numeric.
    """
    if isinstance(value, float) or isinstance(value, bool):
        raise TypeError(f"Monetary values must be Decimal, int or str, not {type(value).__name__}")
    result = value if isinstance(value, Decimal) else Decimal(str(value))
    if not result.is_finite():
        raise ValueError(f"Monetary values must be finite, got {result}")
    return result


# 2/10 net 14 from the invoice date
STANDARD_TERMS = TermsPolicy(net_days=14, discount_days=10, discount_percentage=Decimal("2.0"))
# 3/15 net 60 from the purchase order approval date
PURCHASE_ORDER_TERMS = TermsPolicy(net_days=60, discount_days=15, discount_percentage=Decimal("3.0"))


@dataclass(frozen=True)
class InvoiceResult:
    """Outcome of a state-changing invoice operation.

    Contract: frozen.  Returned, never raised.
    Guarantees: ``success`` results carry no error fields; failures always
    carry ``error_code`` and ``error_message``.
    """
    success: bool
    error_code: InvoiceErrorCode | None = None
    error_message: str | None = None
    error_details: dict[str, Any] | None = None

    def __post_init__(self):
        if self.success and (
            self.error_code is not None
            or self.error_message is not None
            or self.error_details is not None
        ):
            raise ValueError("A successful InvoiceResult cannot carry error fields")
        if not self.success and (self.error_code is None or self.error_message is None):
            raise ValueError("A failed InvoiceResult requires error_code and error_message")

    @classmethod
    def succeeded(cls) -> InvoiceResult:
        return cls(success=True)

    @classmethod
    def failed(
        cls,
        error_code: InvoiceErrorCode | str,
        error_message: str,
        details: dict[str, Any] | None = None,
    ) -> InvoiceResult:
        return cls(
            success=False,
            error_code=InvoiceErrorCode(error_code),
            error_message=error_message,
            error_details=dict(details) if details is not None else None,
        )
