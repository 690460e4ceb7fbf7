"""Discount arithmetic and promotion input rules."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from games_catalog.errors import CatalogValidationError
from games_catalog.models.promotion import PromotionCreate

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


def discounted_price(price: Decimal, discount_percentage: Decimal) -> Decimal:
    """Return ``price`` reduced by ``discount_percentage`` percent.

    Rounded half-up to two fractional digits, so 0.125 becomes 0.13.
    """
    factor = Decimal(1) - Decimal(discount_percentage) / HUNDRED
    return (Decimal(price) * factor).quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_promotion(payload: PromotionCreate) -> PromotionCreate:
    """Reject malformed promotions before they reach the store.

    Returns the payload with its discount rounded to the stored precision;
    the range check applies to the rounded value.

    Raises:
        CatalogValidationError: discount outside (0, 100) or an empty window.
    """
    discount = Decimal(payload.discount_percentage).quantize(CENTS, rounding=ROUND_HALF_UP)
    if not Decimal(0) < discount < HUNDRED:
        raise CatalogValidationError(
            "INVALID_DISCOUNT",
            discount_percentage=payload.discount_percentage,
        )
    if payload.end_date <= payload.start_date:
        raise CatalogValidationError(
            "INVALID_WINDOW",
            start_date=payload.start_date.isoformat(),
            end_date=payload.end_date.isoformat(),
        )
    return payload.model_copy(update={"discount_percentage": discount})
