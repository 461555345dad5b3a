"""
Pytest fixtures for the invoice engine test suite.

Provides:
- Clean logging state for every test
- A deterministic clock and a service bound to it
- Calendar anchors and purchase-order builders

All dates are fixed; nothing here reads the system clock.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from invoice_kernel.domain.clock import DeterministicClock
from invoice_kernel.logging_config import LogContext, reset_logging
from invoice_modules.invoicing import (
    InvoiceService,
    PurchaseOrder,
    PurchaseOrderInvoice,
    StandardInvoice,
)

DAY_0 = date(2025, 1, 15)


def day(offset: int) -> date:
    """Calendar date ``offset`` days from DAY_0."""
    return DAY_0 + timedelta(days=offset)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(DAY_0)


@pytest.fixture
def service(clock) -> InvoiceService:
    return InvoiceService(clock=clock)


@pytest.fixture
def make_po():
    """Build a purchase order: ``make_po(total, approved_offset=-5)``."""

    def _make(
        total: str | int = "10000",
        approved_offset: int = -5,
        number: str = "PO-12345",
        vendor: str = "Acme Corp",
    ) -> PurchaseOrder:
        return PurchaseOrder(number, Decimal(str(total)), vendor, day(approved_offset))

    return _make


@pytest.fixture
def standard_invoice():
    def _make(number: str = "INV-001", amount: str | int = "1000", offset: int = 0) -> StandardInvoice:
        return StandardInvoice(number, Decimal(str(amount)), day(offset))

    return _make


@pytest.fixture
def po_invoice(make_po):
    def _make(
        number: str = "INV-PO-001",
        amount: str | int = "10000",
        po: PurchaseOrder | None = None,
        offset: int = 0,
    ) -> PurchaseOrderInvoice:
        return PurchaseOrderInvoice(
            number,
            Decimal(str(amount)),
            day(offset),
            purchase_order=po if po is not None else make_po(),
        )

    return _make
