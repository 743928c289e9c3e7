from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any

from .errors import InvalidAmount

_CENT = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    """Round to currency precision (2 decimals, half-up).

    Values too large to carry cents at the context precision raise
    :class:`InvalidAmount`.
    """
    try:
        return value.quantize(_CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise InvalidAmount("Amount is too large.", field_errors={"amount": "too large"}) from exc


def to_money(value: Any, default: Decimal | None = Decimal("0")) -> Decimal | None:
    """Coerce numbers and numeric strings to ``Decimal``.

    Floats go through ``str`` so ``0.1`` stays ``Decimal("0.1")``. Returns
    ``default`` for ``None`` and unparseable input; NaN and infinities are
    treated as unparseable.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            return default
    if not result.is_finite():
        return default
    return result
