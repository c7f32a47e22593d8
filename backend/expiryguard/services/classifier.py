import math
from dataclasses import dataclass
from typing import Any, Literal

Action = Literal["discount", "donation"]

ALREADY_DONATED_REASON = "Already marked for donation; a discount can no longer be offered."

# discount needs at least this many days left to have a chance to work
MIN_DAYS_FOR_DISCOUNT = 2


@dataclass(frozen=True)
class Suggestion:
    product: Any
    action: Action
    reason: str
    days_left: int
    already_donated: bool = False


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _donation_reason(quantity: int, avg_daily_sales: float, days_left: int) -> str:
    if days_left < 0:
        ago = -days_left
        return f"Expired {ago} day{'s' if ago != 1 else ''} ago; it can no longer be sold."
    if days_left <= 1:
        when = "today" if days_left == 0 else "tomorrow"
        return f"Expires {when}; selling it in the remaining time is unlikely."
    return (
        f"{days_left} days left; low average daily sales "
        f"({avg_daily_sales:.1f}/day) for {quantity} units in stock."
    )


def classify(product: Any, days_left: int, already_donated: bool) -> Suggestion:
    """
    Decide whether a near-expiry product should be discounted or donated.

    Rules, first match wins:
      1. already donated -> donation (never re-offered for discount)
      2. surplus > 0 and days_left >= 2 and avg_daily_sales > 0 -> discount
      3. anything else -> donation

    ``product`` only needs ``quantity`` and ``avg_daily_sales``. Never raises
    for non-negative inputs; out-of-window ``days_left`` values just end up as
    a donation.
    """
    quantity = int(product.quantity or 0)
    avg_daily_sales = float(product.avg_daily_sales or 0.0)

    if already_donated:
        return Suggestion(product, "donation", ALREADY_DONATED_REASON, days_left, True)

    expected_sales = avg_daily_sales * days_left
    surplus = quantity - expected_sales

    if surplus > 0 and days_left >= MIN_DAYS_FOR_DISCOUNT and avg_daily_sales > 0:
        reason = (
            f"{days_left} days left; surplus of {_round_half_up(surplus)} units "
            f"above expected sales. A discount can speed up sell-through."
        )
        return Suggestion(product, "discount", reason, days_left, False)

    reason = _donation_reason(quantity, avg_daily_sales, days_left)
    return Suggestion(product, "donation", reason, days_left, False)
