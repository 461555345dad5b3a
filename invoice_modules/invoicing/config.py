"""
Invoicing Configuration Schema (``invoice_modules.invoicing.config``).

Responsibility
--------------
Declarative configuration for the invoice engine: the payment-terms policy
of each invoice variant and the discount-reminder window.  Defaults are
2/10 net 14 for standard invoices and 3/15 net 60 for purchase-order
invoices.

Architecture position
---------------------
**Modules layer** -- configuration schema only.  Loaded from YAML by
``invoice_config.loader``; no component here reads files or environment
variables.

Invariants enforced
-------------------
* Each ``TermsPolicy`` validates itself (discount days <= net days,
  percentage in [0, 100]).
* ``reminder_window_days >= 0``.

Failure modes
-------------
* ``InvalidPaymentTermsError`` / ``ValueError`` at construction if any
  constraint is violated.
"""

from dataclasses import dataclass, field
from typing import Any, Self

from invoice_kernel.logging_config import get_logger
from invoice_modules.invoicing.models import (
    PURCHASE_ORDER_TERMS,
    STANDARD_TERMS,
    TermsPolicy,
)

logger = get_logger("modules.invoicing.config")


@dataclass
class InvoicingConfig:
    """
    Configuration schema for the invoicing module.

    Override at instantiation with company-specific values:

        config = InvoicingConfig(
            standard_terms=TermsPolicy(net_days=30, discount_days=10,
                                       discount_percentage=Decimal("2")),
        )
    """

    standard_terms: TermsPolicy = field(default_factory=lambda: STANDARD_TERMS)
    purchase_order_terms: TermsPolicy = field(default_factory=lambda: PURCHASE_ORDER_TERMS)

    # Discount deadlines within this many days are reported as reminders
    reminder_window_days: int = 3

    def __post_init__(self):
        if self.reminder_window_days < 0:
            raise ValueError("reminder_window_days cannot be negative")

        logger.info(
            "invoicing_config_initialized",
            extra={
                "standard_terms": _describe(self.standard_terms),
                "purchase_order_terms": _describe(self.purchase_order_terms),
                "reminder_window_days": self.reminder_window_days,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the default terms policies."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from a dictionary (e.g., a parsed YAML document).

        Preconditions:
            - ``data`` keys match ``InvoicingConfig`` field names.
        Postconditions:
            - Nested terms mappings hydrated into ``TermsPolicy``.
        Raises:
            TypeError: unknown keys.
            InvalidPaymentTermsError: inconsistent terms.
        """
        logger.info(
            "invoicing_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        data = dict(data)
        for key in ("standard_terms", "purchase_order_terms"):
            if isinstance(data.get(key), dict):
                data[key] = TermsPolicy(**data[key])
        return cls(**data)


def _describe(policy: TermsPolicy) -> str:
    return f"{policy.discount_percentage}/{policy.discount_days} net {policy.net_days}"
