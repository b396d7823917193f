"""Cross-field consistency repair for sales facts."""

import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)

Number = Union[int, float]


def repair_sales(
    sales: Optional[Number],
    quantity: Optional[Number],
    price: Optional[Number],
) -> tuple[Optional[Number], Optional[Number]]:
    """Reconcile sales amount and unit price.

    Both corrections read the original inputs; neither sees the other's
    result. Quantity is trusted and never changed.

    - sales is replaced by ``quantity * abs(price)`` when it is null,
      non-positive or disagrees with that product (and the product is
      computable).
    - price is replaced by ``sales / quantity`` when it is null or
      non-positive. Zero or null quantity gives a null price, as does a
      derived price that is not positive.

    Args:
        sales: Raw line sales amount
        quantity: Raw quantity
        price: Raw unit price

    Returns:
        Tuple of (sales, price)

    Example:
        >>> repair_sales(0, 5, 20)
        (100, 20)
        >>> repair_sales(100, 5, None)
        (100, 20)
    """
    expected = None
    if quantity is not None and price is not None:
        expected = quantity * abs(price)

    repaired_sales = sales
    if expected is not None and (sales is None or sales <= 0 or sales != expected):
        repaired_sales = expected

    repaired_price = price
    if price is None or price <= 0:
        repaired_price = _divide(sales, quantity)
        if repaired_price is not None and repaired_price <= 0:
            repaired_price = None

    return repaired_sales, repaired_price


def _divide(numerator: Optional[Number], denominator: Optional[Number]) -> Optional[Number]:
    """Division returning None on null operands or a zero denominator."""
    if numerator is None or not denominator:
        return None
    if isinstance(numerator, int) and isinstance(denominator, int):
        # integer columns truncate toward zero
        return int(numerator / denominator)
    return numerator / denominator
