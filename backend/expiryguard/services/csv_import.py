import csv
import io
import math
import re
from datetime import date
from typing import List, Optional, Sequence, Tuple

from expiryguard.core.errors import ValidationError
from expiryguard.core.logger import get_logger
from expiryguard.models.product import DEFAULT_CATEGORY

logger = get_logger(__name__)

# first matching column wins; local (Serbian) headers come before English ones
COLUMNS = {
    "name": ("naziv", "name"),
    "category": ("kategorija", "category"),
    "quantity": ("kolicina", "quantity"),
    "expiry_date": ("rok", "expiry_date", "datum_isteka"),
    "avg_daily_sales": ("prodaja", "avg_daily_sales"),
    "price": ("cena", "price"),
}


def _pick(row: dict, names: Sequence[str]) -> str:
    for n in names:
        v = (row.get(n) or "").strip()
        if v:
            return v
    return ""


# only the leading number counts: "12abc" is 12, "1e3" is 1 as an int and 1000.0 as a float
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _to_float(raw: str) -> float:
    m = _FLOAT_PREFIX.match(raw)
    if not m:
        return 0.0
    v = float(m.group(1))
    return v if math.isfinite(v) else 0.0


def _to_int(raw: str) -> int:
    m = _INT_PREFIX.match(raw)
    return int(m.group(1)) if m else 0


def _to_date(raw: str) -> Optional[date]:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def parse_product_csv(text: str, created_by: Optional[int] = None) -> Tuple[List[dict], int]:
    """
    Map CSV rows onto product fields.

    Returns ``(rows, skipped)``. Rows without a name or a valid ISO expiry
    date, and rows with negative numbers, are skipped.
    """
    text = text.lstrip("\ufeff")
    reader = csv.reader(io.StringIO(text))

    try:
        headers = [h.strip().lower() for h in next(reader)]
    except StopIteration:
        raise ValidationError("CSV file is empty")

    rows: List[dict] = []
    skipped = 0

    for values in reader:
        if not any(v.strip() for v in values):
            continue

        raw = dict(zip(headers, (v.strip() for v in values)))

        name = _pick(raw, COLUMNS["name"])
        expiry = _to_date(_pick(raw, COLUMNS["expiry_date"]))
        if not name or expiry is None:
            skipped += 1
            continue

        quantity = _to_int(_pick(raw, COLUMNS["quantity"]) or "0")
        sales = _to_float(_pick(raw, COLUMNS["avg_daily_sales"]) or "0")
        price = _to_float(_pick(raw, COLUMNS["price"]) or "0")
        if quantity < 0 or sales < 0 or price < 0:
            skipped += 1
            continue

        rows.append(
            {
                "name": name,
                "category": _pick(raw, COLUMNS["category"]) or DEFAULT_CATEGORY,
                "quantity": quantity,
                "expiry_date": expiry,
                "avg_daily_sales": sales,
                "price": price,
                "created_by": created_by,
            }
        )

    if skipped:
        logger.info("CSV import skipped %d invalid row(s)", skipped)

    return rows, skipped
