"""
Invoice Service (``invoice_modules.invoicing.service``).

Responsibility
--------------
Orchestrates invoice approval -- single and batch -- and the reports built
on payment terms (aging, discount reminders, total payable).  Written only
against the ``InvoiceDocument`` protocol: nothing here inspects which
variant it holds.

Architecture position
---------------------
**Modules layer** -- stateless service.  Holds configuration and a clock,
never invoices.  Every collection is an explicit argument.

Invariants enforced
-------------------
* ``approve_single`` forwards the first failing ``InvoiceResult`` verbatim;
  it never re-wraps or reinterprets an error code.
* ``approve_batch`` walks the whole input once: every invoice yields
  exactly one outcome, in exactly one bucket, in input order.  No item can
  abort the batch.
* Reports read ``get_payment_terms()`` only.

Failure modes
-------------
* Business-rule failures are data (``InvoiceResult`` / ``BatchFailure``).
* An invoice object raising unexpectedly inside ``approve_batch`` is
  recorded as ``UNHANDLED_EXCEPTION`` and logged with its traceback; the
  batch continues.  ``approve_single`` lets such an exception propagate.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import uuid4

from invoice_kernel.domain.clock import Clock, SystemClock
from invoice_kernel.logging_config import LogContext, get_logger
from invoice_modules.invoicing.config import InvoicingConfig
from invoice_modules.invoicing.documents import (
    InvoiceDocument,
    PurchaseOrderInvoice,
    StandardInvoice,
)
from invoice_modules.invoicing.models import (
    InvoiceErrorCode,
    InvoiceResult,
    PurchaseOrder,
)

logger = get_logger("modules.invoicing.service")


@dataclass(frozen=True)
class BatchFailure:
    """One failed invoice in a batch."""
    invoice_number: str
    error_code: InvoiceErrorCode
    error_message: str
    error_details: dict[str, Any] | None = None


@dataclass(frozen=True)
class BatchApprovalResult:
    """Partitioned outcome of ``approve_batch``.

    Guarantees: ``len(successful) + len(failed)`` equals the number of
    invoices submitted; each bucket preserves input order.
    """
    successful: tuple[str, ...] = ()
    failed: tuple[BatchFailure, ...] = ()

    @property
    def total(self) -> int:
        return len(self.successful) + len(self.failed)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class AgingLine:
    """Aging position of one invoice; negative ``days_past_due`` = not yet due."""
    invoice_number: str
    due_date: date
    days_past_due: int


@dataclass(frozen=True)
class DiscountReminder:
    """An early-payment discount whose deadline is approaching."""
    invoice_number: str
    discount_date: date
    discount_percentage: Decimal
    days_remaining: int


class InvoiceService:
    """
    Stateless orchestration over ``InvoiceDocument`` collections.

    Contract:
        Never raises for a business-rule failure.  Never depends on the
        concrete invoice variant.

    Non-goals:
        Persistence, concurrency control (one in-flight transition per
        invoice is the caller's responsibility), currency formatting.
    """

    def __init__(
        self,
        config: InvoicingConfig | None = None,
        clock: Clock | None = None,
    ):
        self._config = config or InvoicingConfig.with_defaults()
        self._clock = clock or SystemClock()

    @property
    def config(self) -> InvoicingConfig:
        return self._config

    # =========================================================================
    # Construction with configured terms
    # =========================================================================

    def standard_invoice(
        self,
        invoice_number: str,
        amount: Decimal | int | str,
        invoice_date: date,
    ) -> StandardInvoice:
        """New draft ``StandardInvoice`` using the configured standard terms."""
        return StandardInvoice(
            invoice_number,
            amount,
            invoice_date,
            terms_policy=self._config.standard_terms,
        )

    def purchase_order_invoice(
        self,
        invoice_number: str,
        amount: Decimal | int | str,
        invoice_date: date,
        purchase_order: PurchaseOrder | None = None,
    ) -> PurchaseOrderInvoice:
        """New draft ``PurchaseOrderInvoice`` using the configured PO terms."""
        return PurchaseOrderInvoice(
            invoice_number,
            amount,
            invoice_date,
            purchase_order=purchase_order,
            terms_policy=self._config.purchase_order_terms,
        )

    # =========================================================================
    # Approval
    # =========================================================================

    def approve_single(self, invoice: InvoiceDocument) -> InvoiceResult:
        """Submit, then approve.

        Postconditions:
            - A failed submit is returned unchanged and ``approve`` is not
              called.
            - Otherwise the result of ``approve`` is returned unchanged.
        """
        with LogContext.bind(invoice_number=invoice.invoice_number):
            submitted = invoice.submit_for_approval()
            if not submitted.success:
                return submitted
            return invoice.approve()

    def approve_batch(self, invoices: Iterable[InvoiceDocument]) -> BatchApprovalResult:
        """Approve every invoice, partitioning outcomes into two buckets.

        Postconditions:
            - Every invoice appears exactly once, in input order within its
              bucket.
            - Never raises for an individual invoice's failure.
        """
        batch_id = str(uuid4())
        successful: list[str] = []
        failed: list[BatchFailure] = []
        with LogContext.bind(batch_id=batch_id):
            for invoice in invoices:
                invoice_number, result = self._approve_item(invoice)
                if result.success:
                    successful.append(invoice_number)
                else:
                    failed.append(
                        BatchFailure(
                            invoice_number=invoice_number,
                            error_code=result.error_code,
                            error_message=result.error_message,
                            error_details=result.error_details,
                        )
                    )
            outcome = BatchApprovalResult(successful=tuple(successful), failed=tuple(failed))
            logger.info(
                "batch_approval_completed",
                extra={
                    "total": outcome.total,
                    "succeeded": len(outcome.successful),
                    "failed": len(outcome.failed),
                    "failed_codes": [f.error_code for f in outcome.failed],
                },
            )
        return outcome

    def _approve_item(self, invoice: InvoiceDocument) -> tuple[str, InvoiceResult]:
        invoice_number = str(getattr(invoice, "invoice_number", repr(invoice)))
        try:
            result = self.approve_single(invoice)
        except Exception as exc:
            logger.exception(
                "batch_item_unhandled_exception",
                extra={"invoice_number": invoice_number},
            )
            result = InvoiceResult.failed(
                InvoiceErrorCode.UNHANDLED_EXCEPTION,
                f"{type(exc).__name__}: {exc}",
            )
        return invoice_number, result

    # =========================================================================
    # Terms-based reports
    # =========================================================================

    def aging(
        self,
        invoices: Iterable[InvoiceDocument],
        as_of: date | None = None,
    ) -> tuple[AgingLine, ...]:
        """Days past due for each invoice, from its own payment terms."""
        as_of = as_of or self._clock.today()
        lines = []
        for invoice in invoices:
            terms = invoice.get_payment_terms()
            lines.append(
                AgingLine(
                    invoice_number=invoice.invoice_number,
                    due_date=terms.due_date,
                    days_past_due=terms.days_past_due(as_of),
                )
            )
        return tuple(lines)

    def discount_reminders(
        self,
        invoices: Iterable[InvoiceDocument],
        as_of: date | None = None,
        window_days: int | None = None,
    ) -> tuple[DiscountReminder, ...]:
        """Invoices whose discount deadline falls within ``window_days`` of
        ``as_of`` (inclusive on both ends)."""
        as_of = as_of or self._clock.today()
        window = self._config.reminder_window_days if window_days is None else window_days
        reminders = []
        for invoice in invoices:
            terms = invoice.get_payment_terms()
            days_remaining = (terms.discount_date - as_of).days
            if 0 <= days_remaining <= window:
                reminders.append(
                    DiscountReminder(
                        invoice_number=invoice.invoice_number,
                        discount_date=terms.discount_date,
                        discount_percentage=terms.discount_percentage,
                        days_remaining=days_remaining,
                    )
                )
        logger.debug(
            "discount_reminders_computed",
            extra={"as_of": as_of, "window_days": window, "count": len(reminders)},
        )
        return tuple(reminders)

    def total_payable(
        self,
        invoices: Iterable[InvoiceDocument],
        payment_date: date,
    ) -> Decimal:
        """Sum of ``calculate_discounted_amount(payment_date)``."""
        return sum(
            (invoice.calculate_discounted_amount(payment_date) for invoice in invoices),
            Decimal("0"),
        )
