"""
QuoteDesk - Discount Service

Resolves the effective percentage-off for each product:
- A global discount applies to every selected product
- Optional per-product overrides take precedence when enabled
- Blank or malformed overrides fall back to the global value
- Every result is clamped into [0, 100]

Malformed input is never an error here; it resolves via fallback.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)

DiscountInput = Union[str, int, float, Decimal, None]

MIN_PERCENTAGE = Decimal("0")
MAX_PERCENTAGE = Decimal("100")


def parse_percentage(raw: DiscountInput) -> Optional[Decimal]:
    """
    Parse free-form discount text into a finite Decimal.

    Returns None for blank, non-numeric, NaN or infinite input.
    Bools are rejected rather than read as 0/1.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, (int, float)):
        value = Decimal(str(raw))
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = Decimal(text)
        except InvalidOperation:
            return None
    if not value.is_finite():
        return None
    return value


def clamp_percentage(value: Decimal) -> Decimal:
    """Clamp into [0, 100]."""
    return max(MIN_PERCENTAGE, min(MAX_PERCENTAGE, value))


def resolve_global_discount(global_input: DiscountInput) -> Decimal:
    """Global discount; anything unparseable counts as 0."""
    parsed = parse_percentage(global_input)
    if parsed is None:
        return MIN_PERCENTAGE
    return clamp_percentage(parsed)


def effective_discount(
    product_id: str,
    global_input: DiscountInput,
    per_product_inputs: Optional[Mapping[str, DiscountInput]],
    use_per_product: bool,
) -> Decimal:
    """
    Effective discount percentage for one product, always within [0, 100].

    Args:
        product_id: Catalog product id
        global_input: Global discount as typed by the user
        per_product_inputs: Optional product id -> override text
        use_per_product: Whether overrides are honoured at all

    Returns:
        The override when enabled and well-formed, otherwise the global value
    """
    global_clamped = resolve_global_discount(global_input)

    if not use_per_product:
        return global_clamped

    raw = (per_product_inputs or {}).get(product_id)
    if raw is None:
        return global_clamped
    if isinstance(raw, str) and not raw.strip():
        return global_clamped

    parsed = parse_percentage(raw)
    if parsed is None:
        logger.debug(f"Ignoring malformed discount override for {product_id}: {raw!r}")
        return global_clamped

    return clamp_percentage(parsed)


@dataclass
class DiscountPolicy:
    """The discount inputs of a quote, as entered by the user."""
    global_input: DiscountInput = "0"
    per_product_inputs: Dict[str, DiscountInput] = field(default_factory=dict)
    use_per_product: bool = False

    @property
    def global_percentage(self) -> Decimal:
        """Clamped global discount shown when a single percentage applies."""
        return resolve_global_discount(self.global_input)

    def discount_for(self, product_id: str) -> Decimal:
        """Effective discount for a product under this policy."""
        return effective_discount(
            product_id,
            self.global_input,
            self.per_product_inputs,
            self.use_per_product,
        )

    def set_override(self, product_id: str, value: DiscountInput) -> None:
        """Store the raw override text; blank text means 'use the global value'."""
        self.per_product_inputs[product_id] = value
