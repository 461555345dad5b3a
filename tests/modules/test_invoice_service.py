"""
Tests for InvoiceService: single and batch approval, and terms-based reports.

The service is written against ``InvoiceDocument`` only; every test mixes
variants to show nothing downstream depends on which one it holds.
"""

from datetime import date
from decimal import Decimal

import pytest

from invoice_kernel.domain.clock import DeterministicClock
from invoice_modules.invoicing import (
    BatchApprovalResult,
    BatchFailure,
    InvoiceErrorCode,
    InvoiceResult,
    InvoicingConfig,
    InvoiceService,
    InvoiceState,
    PurchaseOrderInvoice,
    StandardInvoice,
    TermsPolicy,
)
from tests.conftest import DAY_0, day


class _SpyInvoice:
    """Records which operations the service calls, returns canned results."""

    def __init__(self, submit_result, approve_result=None):
        self.invoice_number = "INV-SPY"
        self.amount = Decimal("1")
        self.state = InvoiceState.DRAFT
        self.calls = []
        self._submit_result = submit_result
        self._approve_result = approve_result or InvoiceResult.succeeded()

    def submit_for_approval(self):
        self.calls.append("submit")
        return self._submit_result

    def approve(self):
        self.calls.append("approve")
        return self._approve_result


class _ExplodingInvoice:
    invoice_number = "INV-BOOM"

    def submit_for_approval(self):
        raise RuntimeError("ledger unavailable")


# =============================================================================
# approve_single
# =============================================================================


class TestApproveSingle:

    def test_standard_invoice_approved(self, service, standard_invoice):
        invoice = standard_invoice()
        result = service.approve_single(invoice)
        assert result.success
        assert invoice.state is InvoiceState.APPROVED

    def test_matching_po_invoice_approved(self, service, po_invoice):
        invoice = po_invoice()
        assert service.approve_single(invoice).success
        assert invoice.state is InvoiceState.APPROVED

    def test_submit_failure_returned_unchanged(self, service):
        refused = InvoiceResult.failed(InvoiceErrorCode.INVALID_AMOUNT, "nope", {"invoice_amount": 0})
        spy = _SpyInvoice(refused)
        assert service.approve_single(spy) is refused
        assert spy.calls == ["submit"]

    def test_approve_result_returned_unchanged(self, service):
        refused = InvoiceResult.failed(InvoiceErrorCode.PO_AMOUNT_MISMATCH, "off by one")
        spy = _SpyInvoice(InvoiceResult.succeeded(), refused)
        assert service.approve_single(spy) is refused
        assert spy.calls == ["submit", "approve"]

    def test_mismatched_po_stays_ready(self, service, po_invoice, make_po):
        invoice = po_invoice(amount="12000", po=make_po(total="10000"))
        result = service.approve_single(invoice)
        assert result.error_code == InvoiceErrorCode.PO_AMOUNT_MISMATCH
        assert result.error_details["difference"] == Decimal("2000")
        assert invoice.state is InvoiceState.READY_FOR_APPROVAL

    def test_zero_amount_refused_before_approval(self, service, standard_invoice):
        invoice = standard_invoice(amount="0")
        result = service.approve_single(invoice)
        assert result.error_code == InvoiceErrorCode.INVALID_AMOUNT
        assert invoice.state is InvoiceState.DRAFT

    def test_already_approved_invoice_refused(self, service, standard_invoice):
        invoice = standard_invoice()
        service.approve_single(invoice)
        result = service.approve_single(invoice)
        assert result.error_code == InvoiceErrorCode.INVALID_STATE
        assert invoice.state is InvoiceState.APPROVED

    def test_unexpected_exception_propagates(self, service):
        with pytest.raises(RuntimeError, match="ledger unavailable"):
            service.approve_single(_ExplodingInvoice())


# =============================================================================
# approve_batch
# =============================================================================


class TestApproveBatch:

    def test_mixed_batch_partitions_outcomes(self, service, standard_invoice, po_invoice, make_po):
        invoices = [
            standard_invoice("INV-001", "1000"),
            standard_invoice("INV-002", "2000"),
            po_invoice("INV-003", "12000", po=make_po(total="10000")),
            po_invoice("INV-004", "5000", po=make_po(total="5000", number="PO-67890")),
        ]
        result = service.approve_batch(invoices)

        assert result.successful == ("INV-001", "INV-002", "INV-004")
        assert len(result.failed) == 1
        failure = result.failed[0]
        assert failure.invoice_number == "INV-003"
        assert failure.error_code == InvoiceErrorCode.PO_AMOUNT_MISMATCH
        assert failure.error_details["purchase_order_number"] == "PO-12345"
        assert [inv.state for inv in invoices] == [
            InvoiceState.APPROVED,
            InvoiceState.APPROVED,
            InvoiceState.READY_FOR_APPROVAL,
            InvoiceState.APPROVED,
        ]

    def test_every_invoice_lands_in_one_bucket(self, service, standard_invoice, po_invoice, make_po):
        invoices = [
            standard_invoice("INV-001"),
            standard_invoice("INV-002", "0"),
            po_invoice("INV-003"),
            po_invoice("INV-004", "1", po=make_po(total="2")),
            standard_invoice("INV-005"),
        ]
        result = service.approve_batch(invoices)

        assert result.total == len(invoices)
        assert result.successful == ("INV-001", "INV-003", "INV-005")
        assert [(f.invoice_number, f.error_code) for f in result.failed] == [
            ("INV-002", InvoiceErrorCode.INVALID_AMOUNT),
            ("INV-004", InvoiceErrorCode.PO_AMOUNT_MISMATCH),
        ]
        assert not result.all_succeeded

    def test_empty_batch(self, service):
        result = service.approve_batch([])
        assert result == BatchApprovalResult()
        assert result.total == 0
        assert result.all_succeeded

    def test_large_batch_keeps_order_in_both_buckets(self, service):
        invoices = [
            StandardInvoice(f"INV-{i:05d}", Decimal(i % 4), DAY_0) for i in range(5000)
        ]
        result = service.approve_batch(invoices)

        assert result.total == 5000
        assert len(result.failed) == 1250
        assert result.successful[:3] == ("INV-00001", "INV-00002", "INV-00003")
        assert [f.invoice_number for f in result.failed[:2]] == ["INV-00000", "INV-00004"]

    def test_accepts_any_iterable(self, service, standard_invoice):
        result = service.approve_batch(standard_invoice(f"INV-{i:03d}") for i in range(3))
        assert result.successful == ("INV-000", "INV-001", "INV-002")

    def test_unexpected_exception_recorded_and_batch_continues(self, service, standard_invoice):
        invoices = [standard_invoice("INV-001"), _ExplodingInvoice(), standard_invoice("INV-002")]
        result = service.approve_batch(invoices)

        assert result.successful == ("INV-001", "INV-002")
        assert result.failed == (
            BatchFailure(
                invoice_number="INV-BOOM",
                error_code=InvoiceErrorCode.UNHANDLED_EXCEPTION,
                error_message="RuntimeError: ledger unavailable",
            ),
        )

    def test_retrying_a_batch_reports_invalid_state(self, service, standard_invoice):
        invoices = [standard_invoice("INV-001"), standard_invoice("INV-002")]
        service.approve_batch(invoices)
        again = service.approve_batch(invoices)
        assert again.successful == ()
        assert {f.error_code for f in again.failed} == {InvoiceErrorCode.INVALID_STATE}

    def test_result_is_frozen(self, service):
        result = service.approve_batch([])
        with pytest.raises(AttributeError):
            result.successful = ("INV-X",)


# =============================================================================
# Reports
# =============================================================================


@pytest.fixture
def portfolio(make_po):
    po = make_po(total="5000", approved_offset=-14, number="PO-67890")
    return [
        StandardInvoice("INV-001", Decimal("5000"), DAY_0),
        StandardInvoice("INV-002", Decimal("5000"), DAY_0),
        PurchaseOrderInvoice("INV-PO-003", Decimal("5000"), DAY_0, purchase_order=po),
    ]


class TestAging:

    def test_days_past_due_per_variant(self, service, portfolio):
        lines = service.aging(portfolio, as_of=date(2025, 2, 5))
        assert [(line.invoice_number, line.days_past_due) for line in lines] == [
            ("INV-001", 7),
            ("INV-002", 7),
            ("INV-PO-003", -25),
        ]
        assert lines[0].due_date == date(2025, 1, 29)
        assert lines[2].due_date == date(2025, 3, 2)

    def test_defaults_to_clock(self, service, portfolio, clock):
        clock.set_date(day(14))
        lines = service.aging(portfolio)
        assert [line.days_past_due for line in lines] == [0, 0, -32]

    def test_empty(self, service):
        assert service.aging([]) == ()


class TestDiscountReminders:

    def test_nothing_inside_window(self, service, portfolio):
        assert service.discount_reminders(portfolio, as_of=date(2025, 1, 20)) == ()

    def test_upcoming_deadline_reported(self, service, portfolio):
        reminders = service.discount_reminders(portfolio, as_of=day(8))
        assert [r.invoice_number for r in reminders] == ["INV-001", "INV-002"]
        assert reminders[0].days_remaining == 2
        assert reminders[0].discount_date == day(10)
        assert reminders[0].discount_percentage == Decimal("2")

    def test_window_is_inclusive(self, service, portfolio):
        assert len(service.discount_reminders(portfolio, as_of=day(7))) == 2
        assert len(service.discount_reminders(portfolio, as_of=day(10))) == 2
        assert service.discount_reminders(portfolio, as_of=day(11)) == ()

    def test_explicit_window(self, service, portfolio):
        reminders = service.discount_reminders(portfolio, as_of=day(0), window_days=10)
        assert [r.invoice_number for r in reminders] == ["INV-001", "INV-002", "INV-PO-003"]
        assert reminders[2].discount_percentage == Decimal("3")
        assert reminders[2].days_remaining == 1

    def test_configured_window(self, clock, portfolio):
        service = InvoiceService(InvoicingConfig(reminder_window_days=10), clock=clock)
        assert len(service.discount_reminders(portfolio)) == 3


class TestTotalPayable:

    def test_mixed_variants(self, service, portfolio):
        assert service.total_payable(portfolio, date(2025, 1, 16)) == Decimal("14650")

    def test_after_every_window(self, service, portfolio):
        assert service.total_payable(portfolio, day(30)) == Decimal("15000")

    def test_empty(self, service):
        assert service.total_payable([], DAY_0) == Decimal("0")


# =============================================================================
# Construction with configured terms
# =============================================================================


class TestFactories:

    def test_default_terms(self, service):
        invoice = service.standard_invoice("INV-001", "1000", DAY_0)
        assert isinstance(invoice, StandardInvoice)
        assert invoice.get_payment_terms().due_date == day(14)

    def test_configured_terms(self, clock, make_po):
        config = InvoicingConfig(
            standard_terms=TermsPolicy(30, 10, Decimal("1")),
            purchase_order_terms=TermsPolicy(45, 20, Decimal("2.5")),
        )
        service = InvoiceService(config, clock=clock)

        standard = service.standard_invoice("INV-001", "1000", DAY_0)
        po = service.purchase_order_invoice("INV-PO-001", "10000", DAY_0, make_po(approved_offset=0))

        assert standard.get_payment_terms().due_date == day(30)
        assert po.get_payment_terms().due_date == day(45)
        assert po.calculate_discounted_amount(day(20)) == Decimal("9750")
        assert service.config is config

    def test_purchase_order_optional(self, service, make_po):
        invoice = service.purchase_order_invoice("INV-PO-001", "10000", DAY_0)
        assert invoice.purchase_order is None
        assert invoice.attach_purchase_order(make_po()).success
        assert service.approve_single(invoice).success

    def test_default_clock_is_system_clock(self):
        service = InvoiceService()
        assert service.aging([]) == ()
        assert isinstance(InvoiceService(clock=DeterministicClock()).config, InvoicingConfig)
