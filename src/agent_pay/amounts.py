# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Amount helpers for USDC-denominated payments.

All arithmetic in the package uses ``decimal.Decimal`` so that a payment
landing a fraction of a cent over a limit is never admitted by rounding.
Floats are converted through ``str()`` which yields their shortest repr
(``0.1`` becomes ``Decimal("0.1")``, not the binary expansion).
"""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation

from agent_pay.errors import InvalidAmountError

USDC_DECIMALS = 6

_MINOR_UNIT = Decimal(1).scaleb(-USDC_DECIMALS)  # 0.000001

AmountLike = Decimal | int | float | str


def to_decimal(value: AmountLike) -> Decimal:
    """
    Convert caller input to a finite, non-negative Decimal.

    Raises InvalidAmountError for booleans, unparsable strings, NaN,
    infinities, and negative values.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(value, "booleans are not amounts")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, (float, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmountError(value, "not a decimal number") from None
    else:
        raise InvalidAmountError(value, f"unsupported type {type(value).__name__}")

    if not amount.is_finite():
        raise InvalidAmountError(value, "amount must be finite")
    if amount < 0:
        raise InvalidAmountError(value, "amount must not be negative")
    return amount


def to_minor_units(amount: AmountLike) -> int:
    """
    Convert a human-unit amount to integer minor units (6 decimals).

    Sub-minor-unit precision is truncated, never rounded up.
    """
    value = to_decimal(amount)
    return int((value / _MINOR_UNIT).to_integral_value(rounding=ROUND_DOWN))


def from_minor_units(raw: int | str) -> Decimal:
    """Convert an integer minor-unit amount (e.g. ``"1500000"``) to human units."""
    try:
        minor = int(raw)
    except (TypeError, ValueError):
        raise InvalidAmountError(raw, "minor units must be an integer") from None
    if minor < 0:
        raise InvalidAmountError(raw, "amount must not be negative")
    return Decimal(minor).scaleb(-USDC_DECIMALS)


def format_amount(amount: AmountLike) -> str:
    """Render an amount with exactly six decimal places, e.g. ``"0.050000"``."""
    return str(to_decimal(amount).quantize(_MINOR_UNIT, rounding=ROUND_DOWN))
