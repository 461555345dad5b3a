"""
Invoice Documents (``invoice_modules.invoicing.documents``).

Responsibility
--------------
The ``InvoiceDocument`` capability protocol and its two variants,
``StandardInvoice`` and ``PurchaseOrderInvoice``.  Both variants honor the
exact same contract: identical operations, identical result shape, no
variant-specific exceptions.  Where the variants differ (payment-terms
anchor and policy, the purchase-order match on approval) the difference is
advertised through returned values -- ``PaymentTerms`` and
``InvoiceResult`` -- never hidden inside a same-named calculation.

Architecture position
---------------------
**Modules layer** -- mutable documents over pure value objects.  State
changes go through ``workflows.advance``; terms come from a
``TermsPolicy``; the discount algorithm lives on ``PaymentTerms``.

Invariants enforced
-------------------
* ``state`` only moves along ``INVOICE_WORKFLOW`` edges.
* ``amount`` changes only while in draft.
* A purchase order, once attached, is never replaced or cleared.
* Business-rule failures are returned as ``InvoiceResult``; only invalid
  construction or attach-time input raises.

Failure modes
-------------
* ``InvalidInvoiceError`` -- empty invoice number, non-date invoice date,
  float, non-numeric or non-finite amount.
* ``MissingPurchaseOrderError`` -- ``attach_purchase_order(None)``.
* ``InvalidPurchaseOrderError`` -- a purchase order argument that is not a
  ``PurchaseOrder``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Protocol, runtime_checkable

from invoice_kernel.exceptions import (
    InvalidInvoiceError,
    InvalidPurchaseOrderError,
    MissingPurchaseOrderError,
)
from invoice_kernel.logging_config import get_logger
from invoice_modules.invoicing.models import (
    PURCHASE_ORDER_TERMS,
    STANDARD_TERMS,
    InvoiceErrorCode,
    InvoiceResult,
    InvoiceState,
    PaymentTerms,
    PurchaseOrder,
    TermsPolicy,
    to_decimal,
)
from invoice_modules.invoicing.workflows import (
    APPROVE,
    INVOICE_WORKFLOW,
    REJECT,
    SUBMIT,
    advance,
    check_submittable,
    check_transition,
)

logger = get_logger("modules.invoicing.documents")


@runtime_checkable
class InvoiceDocument(Protocol):
    """Capability set every invoice variant implements.

    Callers holding an ``InvoiceDocument`` never need to know which variant
    they have: every operation returns the same types and fails the same way.
    """

    @property
    def invoice_number(self) -> str: ...

    @property
    def amount(self) -> Decimal: ...

    @property
    def state(self) -> InvoiceState: ...

    def submit_for_approval(self) -> InvoiceResult: ...

    def approve(self) -> InvoiceResult: ...

    def reject(self, reason: str = "") -> InvoiceResult: ...

    def update_amount(self, new_amount: Decimal) -> InvoiceResult: ...

    def get_payment_terms(self) -> PaymentTerms: ...

    def calculate_discounted_amount(self, payment_date: date) -> Decimal: ...


def _validate_number(invoice_number: str) -> str:
    if not isinstance(invoice_number, str) or not invoice_number.strip():
        raise InvalidInvoiceError("invoice_number", "must be a non-empty string")
    return invoice_number


def _validate_amount(amount: Decimal | int | str) -> Decimal:
    try:
        return to_decimal(amount)
    except (TypeError, ValueError, InvalidOperation) as exc:
        raise InvalidInvoiceError("amount", str(exc) or "not a decimal value") from exc


def _validate_date(invoice_date: date) -> date:
    if not isinstance(invoice_date, date):
        raise InvalidInvoiceError("invoice_date", f"expected a date, got {type(invoice_date).__name__}")
    return invoice_date


def _validate_purchase_order(purchase_order: PurchaseOrder, invoice_number: str) -> PurchaseOrder:
    if purchase_order is None:
        raise MissingPurchaseOrderError(invoice_number)
    if not isinstance(purchase_order, PurchaseOrder):
        raise InvalidPurchaseOrderError(
            str(purchase_order), f"expected a PurchaseOrder, got {type(purchase_order).__name__}"
        )
    return purchase_order


_OUTCOME_EVENTS = {
    SUBMIT: ("invoice_submitted", "invoice_submission_refused"),
    APPROVE: ("invoice_approved", "invoice_approval_refused"),
    REJECT: ("invoice_rejected", "invoice_rejection_refused"),
    "update_amount": ("invoice_amount_updated", "invoice_amount_update_refused"),
    "attach_purchase_order": ("invoice_purchase_order_attached", "invoice_purchase_order_refused"),
}


def _log_outcome(invoice: InvoiceDocument, action: str, result: InvoiceResult) -> InvoiceResult:
    succeeded_event, refused_event = _OUTCOME_EVENTS[action]
    if result.success:
        logger.info(
            succeeded_event,
            extra={"invoice_number": invoice.invoice_number, "state": invoice.state.value},
        )
    else:
        logger.info(
            refused_event,
            extra={
                "invoice_number": invoice.invoice_number,
                "state": invoice.state.value,
                "error_code": result.error_code,
            },
        )
    return result


def _check_draft(state: InvoiceState, what: str) -> InvoiceResult | None:
    if state is not InvoiceState.DRAFT:
        return InvoiceResult.failed(
            InvoiceErrorCode.INVALID_STATE,
            f"Cannot {what} invoice in {state.value} state",
            {"state": state.value},
        )
    return None


class StandardInvoice:
    """An invoice with no purchase order behind it.

    Terms: ``STANDARD_TERMS`` (2/10 net 14) anchored at the invoice date,
    unless another policy is supplied.
    """

    def __init__(
        self,
        invoice_number: str,
        amount: Decimal | int | str,
        invoice_date: date,
        terms_policy: TermsPolicy | None = None,
    ):
        self._invoice_number = _validate_number(invoice_number)
        self._amount = _validate_amount(amount)
        self._invoice_date = _validate_date(invoice_date)
        self._terms_policy = terms_policy or STANDARD_TERMS
        self._state = INVOICE_WORKFLOW.initial_state
        logger.debug(
            "invoice_created",
            extra={
                "invoice_number": self._invoice_number,
                "variant": "standard",
                "amount": str(self._amount),
                "invoice_date": self._invoice_date.isoformat(),
            },
        )

    @property
    def invoice_number(self) -> str:
        return self._invoice_number

    @property
    def amount(self) -> Decimal:
        return self._amount

    @property
    def state(self) -> InvoiceState:
        return self._state

    @property
    def invoice_date(self) -> date:
        return self._invoice_date

    @property
    def anchor_date(self) -> date:
        return self._invoice_date

    def update_amount(self, new_amount: Decimal | int | str) -> InvoiceResult:
        """Replace the amount; only allowed in draft."""
        amount = _validate_amount(new_amount)
        failure = _check_draft(self._state, "update the amount of")
        if failure:
            return _log_outcome(self, "update_amount", failure)
        self._amount = amount
        return _log_outcome(self, "update_amount", InvoiceResult.succeeded())

    def submit_for_approval(self) -> InvoiceResult:
        failure = check_submittable(self._amount, self._state)
        if failure:
            return _log_outcome(self, SUBMIT, failure)
        self._state = advance(self._state, SUBMIT)
        return _log_outcome(self, SUBMIT, InvoiceResult.succeeded())

    def approve(self) -> InvoiceResult:
        failure = check_transition(self._state, APPROVE)
        if failure:
            return _log_outcome(self, APPROVE, failure)
        self._state = advance(self._state, APPROVE)
        return _log_outcome(self, APPROVE, InvoiceResult.succeeded())

    def reject(self, reason: str = "") -> InvoiceResult:
        failure = check_transition(self._state, REJECT)
        if failure:
            return _log_outcome(self, REJECT, failure)
        self._state = advance(self._state, REJECT)
        logger.info("invoice_rejection_reason", extra={"invoice_number": self._invoice_number, "reason": reason})
        return _log_outcome(self, REJECT, InvoiceResult.succeeded())

    def get_payment_terms(self) -> PaymentTerms:
        return self._terms_policy.terms_from(self.anchor_date)

    def calculate_discounted_amount(self, payment_date: date) -> Decimal:
        return self.get_payment_terms().discounted_amount(self._amount, payment_date)

    def __repr__(self) -> str:
        return (
            f"StandardInvoice({self._invoice_number!r}, amount={self._amount}, "
            f"state={self._state.value})"
        )


class PurchaseOrderInvoice:
    """An invoice matched against a purchase order.

    Terms: ``PURCHASE_ORDER_TERMS`` (3/15 net 60) anchored at the purchase
    order's approval date -- or at the invoice date while no purchase order
    is attached.  The anchor and policy are visible in ``get_payment_terms()``.

    Approval additionally requires an attached purchase order whose total
    equals the invoice amount exactly; a mismatch is returned as
    ``PO_AMOUNT_MISMATCH`` with the figures in ``error_details``.
    """

    def __init__(
        self,
        invoice_number: str,
        amount: Decimal | int | str,
        invoice_date: date,
        purchase_order: PurchaseOrder | None = None,
        terms_policy: TermsPolicy | None = None,
    ):
        self._invoice_number = _validate_number(invoice_number)
        self._amount = _validate_amount(amount)
        self._invoice_date = _validate_date(invoice_date)
        self._terms_policy = terms_policy or PURCHASE_ORDER_TERMS
        self._state = INVOICE_WORKFLOW.initial_state
        self._purchase_order = (
            None if purchase_order is None
            else _validate_purchase_order(purchase_order, self._invoice_number)
        )
        logger.debug(
            "invoice_created",
            extra={
                "invoice_number": self._invoice_number,
                "variant": "purchase_order",
                "amount": str(self._amount),
                "invoice_date": self._invoice_date.isoformat(),
                "purchase_order_number": purchase_order.number if purchase_order else None,
            },
        )

    @property
    def invoice_number(self) -> str:
        return self._invoice_number

    @property
    def amount(self) -> Decimal:
        return self._amount

    @property
    def state(self) -> InvoiceState:
        return self._state

    @property
    def invoice_date(self) -> date:
        return self._invoice_date

    @property
    def purchase_order(self) -> PurchaseOrder | None:
        return self._purchase_order

    @property
    def anchor_date(self) -> date:
        if self._purchase_order is None:
            return self._invoice_date
        return self._purchase_order.approved_date

    def attach_purchase_order(self, purchase_order: PurchaseOrder) -> InvoiceResult:
        """Attach the purchase order this invoice is matched against.

        Raises:
            MissingPurchaseOrderError: ``purchase_order`` is None.
            InvalidPurchaseOrderError: ``purchase_order`` is not a ``PurchaseOrder``.
        """
        _validate_purchase_order(purchase_order, self._invoice_number)
        failure = _check_draft(self._state, "attach a purchase order to")
        if failure is None and self._purchase_order is not None:
            failure = InvoiceResult.failed(
                InvoiceErrorCode.INVALID_STATE,
                f"Invoice {self._invoice_number} already has purchase order "
                f"{self._purchase_order.number}",
                {
                    "state": self._state.value,
                    "purchase_order_number": self._purchase_order.number,
                },
            )
        if failure:
            return _log_outcome(self, "attach_purchase_order", failure)
        self._purchase_order = purchase_order
        return _log_outcome(self, "attach_purchase_order", InvoiceResult.succeeded())

    def update_amount(self, new_amount: Decimal | int | str) -> InvoiceResult:
        """Replace the amount; only allowed in draft."""
        amount = _validate_amount(new_amount)
        failure = _check_draft(self._state, "update the amount of")
        if failure:
            return _log_outcome(self, "update_amount", failure)
        self._amount = amount
        return _log_outcome(self, "update_amount", InvoiceResult.succeeded())

    def submit_for_approval(self) -> InvoiceResult:
        # The PO match is deferred to approve() so submit's contract is the
        # same for every variant.
        failure = check_submittable(self._amount, self._state)
        if failure:
            return _log_outcome(self, SUBMIT, failure)
        self._state = advance(self._state, SUBMIT)
        return _log_outcome(self, SUBMIT, InvoiceResult.succeeded())

    def approve(self) -> InvoiceResult:
        failure = check_transition(self._state, APPROVE) or self._check_purchase_order_match()
        if failure:
            return _log_outcome(self, APPROVE, failure)
        self._state = advance(self._state, APPROVE)
        return _log_outcome(self, APPROVE, InvoiceResult.succeeded())

    def reject(self, reason: str = "") -> InvoiceResult:
        failure = check_transition(self._state, REJECT)
        if failure:
            return _log_outcome(self, REJECT, failure)
        self._state = advance(self._state, REJECT)
        logger.info("invoice_rejection_reason", extra={"invoice_number": self._invoice_number, "reason": reason})
        return _log_outcome(self, REJECT, InvoiceResult.succeeded())

    def get_payment_terms(self) -> PaymentTerms:
        return self._terms_policy.terms_from(self.anchor_date)

    def calculate_discounted_amount(self, payment_date: date) -> Decimal:
        return self.get_payment_terms().discounted_amount(self._amount, payment_date)

    def _check_purchase_order_match(self) -> InvoiceResult | None:
        po = self._purchase_order
        if po is None:
            return InvoiceResult.failed(
                InvoiceErrorCode.PO_NOT_ATTACHED,
                f"Invoice {self._invoice_number} has no purchase order to match against",
            )
        if self._amount != po.total_amount:
            return InvoiceResult.failed(
                InvoiceErrorCode.PO_AMOUNT_MISMATCH,
                f"Invoice amount {self._amount} does not match PO {po.number} "
                f"total {po.total_amount}",
                {
                    "purchase_order_number": po.number,
                    "purchase_order_vendor": po.vendor,
                    "purchase_order_total": po.total_amount,
                    "invoice_amount": self._amount,
                    "difference": self._amount - po.total_amount,
                },
            )
        return None

    def __repr__(self) -> str:
        po_number = self._purchase_order.number if self._purchase_order else None
        return (
            f"PurchaseOrderInvoice({self._invoice_number!r}, amount={self._amount}, "
            f"purchase_order={po_number!r}, state={self._state.value})"
        )

