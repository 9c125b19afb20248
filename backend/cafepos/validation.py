from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any


# Maximum amount: 9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999

# Per cart line; line and cart totals are capped at MAX_PRICE_CENTS as well
MAX_LINE_QUANTITY = 10_000

_CENT = Decimal("0.01")
_MAX_AMOUNT = Decimal(MAX_PRICE_CENTS) / 100


class ValidationError(ValueError):
    """400-level input problem."""


class AuthenticationError(ValueError):
    """401-level credential problem."""


class NotFoundError(LookupError):
    """404-level unresolvable reference (user, table, order, stock item, product)."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., insufficient stock)."""


def to_cents(value: Any, field: str, *, allow_zero: bool = True) -> int:
    """
    Convert a currency amount from the API ("25", 25, 12.5) to integer cents.

    Rounds half-up to the cent. Rejects booleans, NaN/infinity, negatives
    and (unless allow_zero) zero.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValidationError(f"{field} must be a number")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    # quantize() raises InvalidOperation past the context precision, so bound first
    if amount > _MAX_AMOUNT:
        raise ValidationError(f"{field} exceeds maximum of {_MAX_AMOUNT:.2f}")
    if amount < -_MAX_AMOUNT:
        raise ValidationError(f"{field} must not be negative")

    cents = int((amount.quantize(_CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())
    if cents < 0:
        raise ValidationError(f"{field} must not be negative")
    if cents == 0 and not allow_zero:
        raise ValidationError(f"{field} must be positive")
    if cents > MAX_PRICE_CENTS:
        raise ValidationError(f"{field} exceeds maximum of {MAX_PRICE_CENTS / 100:.2f}")
    return cents


def from_cents(cents: int | None) -> float | None:
    """Integer cents back to a currency amount for JSON responses."""
    if cents is None:
        return None
    return float(Decimal(cents) / 100)


def to_int(value: Any, field: str, *, minimum: int | None = None) -> int:
    """
    Strict integer coercion.

    Accepts ints and plain digit strings; rejects floats, booleans,
    decimals and scientific notation.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped or "e" in stripped.lower() or "." in stripped:
            raise ValidationError(f"{field} must be an integer")
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    elif isinstance(value, float) and value.is_integer():
        result = int(value)
    else:
        raise ValidationError(f"{field} must be an integer")

    if minimum is not None and result < minimum:
        raise ValidationError(f"{field} must be at least {minimum}")
    return result


def to_optional_int(value: Any, field: str) -> int | None:
    if value is None or value == "":
        return None
    return to_int(value, field, minimum=1)


def to_text(value: Any, field: str, *, max_length: int, required: bool = True) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(f"{field} is required")
        return None
    text = str(value).strip()
    if len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return text


@dataclass(frozen=True)
class CartLine:
    """One validated cart line, prices in cents."""
    product_id: int | None
    name: str
    unit_price_cents: int
    quantity: int

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


def parse_cart(items: Any) -> list[CartLine]:
    """
    Validate the client cart.

    Each item needs a display name, a non-negative price and a positive
    integer quantity. The product id is optional (open-price items).
    """
    if not isinstance(items, list) or not items:
        raise ValidationError("items must be a non-empty list")

    lines = []
    for index, item in enumerate(items):
        label = f"items[{index}]"
        if not isinstance(item, dict):
            raise ValidationError(f"{label} must be an object")
        line = CartLine(
            product_id=to_optional_int(item.get("id"), f"{label}.id"),
            name=to_text(item.get("name"), f"{label}.name", max_length=255),
            unit_price_cents=to_cents(item.get("price"), f"{label}.price"),
            quantity=to_int(item.get("quantity"), f"{label}.quantity", minimum=1),
        )
        if line.quantity > MAX_LINE_QUANTITY:
            raise ValidationError(f"{label}.quantity must be at most {MAX_LINE_QUANTITY}")
        if line.line_total_cents > MAX_PRICE_CENTS:
            raise ValidationError(f"{label} total exceeds maximum of {MAX_PRICE_CENTS / 100:.2f}")
        lines.append(line)

    if sum(line.line_total_cents for line in lines) > MAX_PRICE_CENTS:
        raise ValidationError(f"Cart total exceeds maximum of {MAX_PRICE_CENTS / 100:.2f}")
    return lines
