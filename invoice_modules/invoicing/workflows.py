"""
Invoice Workflow (``invoice_modules.invoicing.workflows``).

Responsibility
--------------
Declares the invoice state machine and the guard checks shared by every
invoice document.  Documents never assign ``state`` directly: they ask
``next_state`` for the edge and keep their state when none exists.

Architecture position
---------------------
**Modules layer** -- declarative workflow definition.  Imports canonical
Guard, Transition, Workflow from ``invoice_kernel.domain.workflow``.

Invariants enforced
-------------------
* State only advances draft -> ready_for_approval -> approved, or
  ready_for_approval -> rejected.  No edge skips a step or reverses.
* ``approved`` and ``rejected`` are terminal.
"""

from decimal import Decimal

from invoice_kernel.domain.workflow import Guard, Transition, Workflow, next_state
from invoice_kernel.logging_config import get_logger
from invoice_modules.invoicing.models import InvoiceErrorCode, InvoiceResult, InvoiceState

logger = get_logger("modules.invoicing.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

POSITIVE_AMOUNT = Guard(
    name="positive_amount",
    description="Invoice amount must be greater than zero",
)

MATCHES_PURCHASE_ORDER = Guard(
    name="matches_purchase_order",
    description="Purchase-order invoices: amount equals the PO total exactly",
)


# -----------------------------------------------------------------------------
# Invoice Workflow
# -----------------------------------------------------------------------------

SUBMIT = "submit"
APPROVE = "approve"
REJECT = "reject"

INVOICE_WORKFLOW = Workflow(
    name="invoice",
    description="Invoice approval workflow",
    initial_state=InvoiceState.DRAFT,
    states=tuple(InvoiceState),
    terminal_states=(InvoiceState.APPROVED, InvoiceState.REJECTED),
    transitions=(
        Transition(InvoiceState.DRAFT, InvoiceState.READY_FOR_APPROVAL, action=SUBMIT, guard=POSITIVE_AMOUNT),
        Transition(
            InvoiceState.READY_FOR_APPROVAL,
            InvoiceState.APPROVED,
            action=APPROVE,
            guard=MATCHES_PURCHASE_ORDER,
        ),
        Transition(InvoiceState.READY_FOR_APPROVAL, InvoiceState.REJECTED, action=REJECT),
    ),
)

logger.info(
    "invoice_workflow_registered",
    extra={
        "workflow_name": INVOICE_WORKFLOW.name,
        "state_count": len(INVOICE_WORKFLOW.states),
        "transition_count": len(INVOICE_WORKFLOW.transitions),
        "initial_state": INVOICE_WORKFLOW.initial_state.value,
    },
)


# -----------------------------------------------------------------------------
# Shared guard checks
# -----------------------------------------------------------------------------

def check_transition(state: InvoiceState, action: str) -> InvoiceResult | None:
    """INVALID_STATE failure when ``action`` has no edge from ``state``."""
    if next_state(INVOICE_WORKFLOW, state, action) is None:
        return InvoiceResult.failed(
            InvoiceErrorCode.INVALID_STATE,
            f"Cannot {action} invoice in {state.value} state",
            {"state": state.value, "action": action},
        )
    return None


def check_submittable(amount: Decimal, state: InvoiceState) -> InvoiceResult | None:
    """Guards for ``submit``: amount first, then state."""
    if amount <= 0:
        return InvoiceResult.failed(
            InvoiceErrorCode.INVALID_AMOUNT,
            "Invoice amount must be greater than zero",
            {"invoice_amount": amount},
        )
    return check_transition(state, SUBMIT)


def advance(state: InvoiceState, action: str) -> InvoiceState:
    """Target state of a transition already cleared by ``check_transition``."""
    target = next_state(INVOICE_WORKFLOW, state, action)
    if target is None:
        raise RuntimeError(f"No {action!r} transition from {state.value}")
    return target
