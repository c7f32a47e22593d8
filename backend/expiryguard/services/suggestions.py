"""
Risk-zone orchestration: fetch candidates, classify them, confirm decisions.

The flow is an explicit loop driven by the caller:

    load_risk_zone -> show -> confirm_action -> load_risk_zone again

Nothing here caches suggestions between calls.
"""

from typing import Any, AbstractSet, Iterable, List, Optional

from sqlalchemy.orm import Session

from expiryguard.core.config import settings
from expiryguard.core.errors import ConflictError, StoreError, ValidationError
from expiryguard.core.logger import get_logger
from expiryguard.models.action_history import ACTION_TYPES, ActionHistory, DISCOUNT, DONATION
from expiryguard.services import store
from expiryguard.services.classifier import Suggestion, classify
from expiryguard.services.datemath import Reference, days_until, risk_window_end, today, utcnow

logger = get_logger(__name__)


def build_suggestions(
    products: Iterable[Any],
    donated_ids: AbstractSet[int],
    now: Reference,
) -> List[Suggestion]:
    """One suggestion per product, in the order the store returned them."""
    out: List[Suggestion] = []
    for p in products:
        s = classify(p, days_until(p.expiry_date, now), p.id in donated_ids)
        logger.debug("product=%s days_left=%s -> %s", p.id, s.days_left, s.action)
        out.append(s)
    return out


def load_risk_zone(db: Session, now: Optional[Reference] = None) -> List[Suggestion]:
    now = now or utcnow()

    products = store.list_candidate_products(db, now, settings.risk_zone_horizon_days)
    donated = store.donated_product_ids(db)

    return build_suggestions(products, donated, now)


def validate_discount_percentage(pct: Optional[int]) -> int:
    if pct is None:
        pct = settings.default_discount_percent
    if isinstance(pct, bool) or not isinstance(pct, int) or not 1 <= pct <= 100:
        raise ValidationError("Discount percentage must be an integer between 1 and 100")
    return pct


def confirm_action(
    db: Session,
    product_id: int,
    action: str,
    discount_percentage: Optional[int] = None,
    *,
    actor: str,
    decided_by: Optional[int] = None,
    now: Optional[Reference] = None,
) -> ActionHistory:
    """
    Record a confirmed decision for one product.

    The ledger entry is written first. Only a donation touches the product,
    and only after the entry is stored, so every zeroed product has an entry.
    Donating an already donated product adds nothing to the ledger and
    returns the existing donation entry.
    """
    if action not in ACTION_TYPES:
        raise ValidationError(f"Unknown action '{action}'")

    p = store.get_product(db, product_id)
    already_donated = product_id in store.donated_product_ids(db)

    if action == DISCOUNT:
        discount_percentage = validate_discount_percentage(discount_percentage)
        if already_donated:
            raise ConflictError("Product was already donated and cannot be discounted")
    else:
        discount_percentage = None

    if action == DONATION and already_donated:
        # no new entry; only re-apply the zeroing in case it failed last time
        entry = store.latest_history_entry(db, product_id, DONATION)
        logger.info("Product %s already donated (entry %s), nothing recorded", product_id, entry.id)
    else:
        now = now or utcnow()
        suggestion = classify(p, days_until(p.expiry_date, now), already_donated)

        entry = store.append_history_entry(
            db,
            product_id=product_id,
            action_type=action,
            discount_percentage=discount_percentage,
            reason=suggestion.reason,
            decided_by=decided_by,
            actor=actor,
        )
        logger.info(
            "Confirmed %s for product %s by %s (entry %s, suggested %s)",
            action, product_id, actor, entry.id, suggestion.action,
        )

    if action == DONATION:
        try:
            store.set_product_quantity(db, product_id, 0)
        except StoreError:
            logger.warning(
                "Inconsistent stock: history entry %s marks product %s as donated "
                "but its quantity could not be set to 0",
                entry.id, product_id,
            )
            raise

    return entry


def dashboard_counts(db: Session, now: Optional[Reference] = None) -> dict:
    now = now or utcnow()

    return {
        "total_products": store.count_products(db),
        "risk_products": store.count_products_expiring(
            db, today(now), risk_window_end(now, settings.dashboard_risk_horizon_days)
        ),
        "discounted": store.count_history(db, DISCOUNT),
        "donated": store.count_history(db, DONATION),
    }
