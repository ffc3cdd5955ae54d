from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext


def format_naira(amount: Decimal, *, decimals: bool = True) -> str:
    exponent = Decimal("0.01") if decimals else Decimal("1")
    with localcontext() as ctx:
        # Room for every integer digit plus kobo
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        q = amount.quantize(exponent, rounding=ROUND_HALF_UP)
    return f"₦{q:,}"
