"""
Configuration Loader (``invoice_config.loader``).

Responsibility
--------------
Loads an invoicing configuration YAML file and parses it into a typed
``InvoicingConfig``.

Expected document shape::

    standard_terms:
      net_days: 14
      discount_days: 10
      discount_percentage: "2.0"
    purchase_order_terms:
      net_days: 60
      discount_days: 15
      discount_percentage: "3.0"
    reminder_window_days: 3

Every key is optional; omitted keys keep their defaults.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys, missing terms keys, float percentages, non-integer day
  counts, or terms that fail validation  -> ``ConfigurationError``.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from invoice_kernel.exceptions import ConfigurationError, InvalidPaymentTermsError
from invoice_kernel.logging_config import get_logger
from invoice_modules.invoicing.config import InvoicingConfig
from invoice_modules.invoicing.models import TermsPolicy

logger = get_logger("config.loader")

_TERMS_KEYS = ("standard_terms", "purchase_order_terms")
_TOP_LEVEL_KEYS = frozenset(_TERMS_KEYS) | {"reminder_window_days"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, source: str) -> Decimal:
    """Parse a YAML scalar into ``Decimal``; floats are refused."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (float, bool)) or value is None:
        raise ConfigurationError(
            source, f"expected a quoted decimal or integer, got {value!r}"
        )
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ConfigurationError(source, f"not a decimal: {value!r}") from exc


def parse_int(value: Any, source: str) -> int:
    """Parse a YAML scalar into ``int``; floats, bools and non-integer
    strings are refused."""
    if isinstance(value, (float, bool)) or value is None:
        raise ConfigurationError(source, f"expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ConfigurationError(source, f"not an integer: {value!r}") from exc


def parse_terms_policy(data: dict[str, Any], source: str = "<dict>") -> TermsPolicy:
    """Parse a ``TermsPolicy`` from a dict."""
    if not isinstance(data, dict):
        raise ConfigurationError(source, f"terms must be a mapping, got {type(data).__name__}")
    try:
        return TermsPolicy(
            net_days=parse_int(data["net_days"], f"{source}:net_days"),
            discount_days=parse_int(data["discount_days"], f"{source}:discount_days"),
            discount_percentage=parse_decimal(data["discount_percentage"], source),
        )
    except KeyError as exc:
        raise ConfigurationError(source, f"missing terms key {exc.args[0]!r}") from exc
    except InvalidPaymentTermsError as exc:
        raise ConfigurationError(source, exc.reason) from exc


def parse_invoicing_config(data: dict[str, Any], source: str = "<dict>") -> InvoicingConfig:
    """Build an ``InvoicingConfig`` from a parsed document."""
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigurationError(source, f"unknown keys {sorted(unknown)}")

    fields: dict[str, Any] = {}
    for key in _TERMS_KEYS:
        if key in data:
            fields[key] = parse_terms_policy(data[key], f"{source}:{key}")
    if "reminder_window_days" in data:
        fields["reminder_window_days"] = parse_int(
            data["reminder_window_days"], f"{source}:reminder_window_days"
        )

    try:
        return InvoicingConfig.from_dict(fields)
    except ValueError as exc:
        raise ConfigurationError(source, str(exc)) from exc


def load_invoicing_config(path: Path | str) -> InvoicingConfig:
    """Load and parse an invoicing configuration file."""
    path = Path(path)
    logger.info("invoicing_config_loading", extra={"path": str(path)})
    return parse_invoicing_config(load_yaml_file(path), str(path))
