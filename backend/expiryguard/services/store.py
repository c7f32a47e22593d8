"""
Database access for products and the action-history ledger.

Every function takes the request's ``Session``. Writes commit before
returning. Any SQLAlchemy failure rolls the session back and surfaces as
``StoreError`` so callers deal with one error type at the I/O boundary.
"""

from contextlib import contextmanager
from datetime import date
from typing import Iterable, Iterator, List, Mapping, Optional, Set

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from expiryguard.core.errors import NotFoundError, StoreError
from expiryguard.core.logger import get_logger
from expiryguard.models.action_history import ActionHistory, DONATION
from expiryguard.models.product import Product
from expiryguard.services.datemath import Reference, risk_window_end, today

logger = get_logger(__name__)

PRODUCT_FIELDS = ("name", "category", "quantity", "expiry_date", "avg_daily_sales", "price", "created_by")


@contextmanager
def store_errors(db: Session, what: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Store failure while trying to %s: %s", what, e)
        raise StoreError(f"Could not {what}") from e


# ---------- PRODUCTS ----------

def list_products(db: Session) -> List[Product]:
    with store_errors(db, "list products"):
        return db.query(Product).order_by(Product.expiry_date.asc(), Product.id.asc()).all()


def get_product(db: Session, product_id: int) -> Product:
    with store_errors(db, "load product"):
        p = db.get(Product, product_id)
    if not p:
        raise NotFoundError("Product not found")
    return p


def list_candidate_products(db: Session, now: Reference, horizon_days: int) -> List[Product]:
    """In stock, expiring between today and today + horizon, soonest first."""
    start = today(now)
    end = risk_window_end(now, horizon_days)

    with store_errors(db, "list risk candidates"):
        return (
            db.query(Product)
            .filter(
                Product.quantity > 0,
                Product.expiry_date >= start,
                Product.expiry_date <= end,
            )
            .order_by(Product.expiry_date.asc(), Product.id.asc())
            .all()
        )


def create_product(db: Session, fields: Mapping) -> Product:
    p = Product(**{k: v for k, v in fields.items() if k in PRODUCT_FIELDS})
    with store_errors(db, "create product"):
        db.add(p)
        db.commit()
        db.refresh(p)
    return p


def create_products(db: Session, rows: Iterable[Mapping]) -> List[Product]:
    """Bulk insert; all rows or none."""
    products = [Product(**{k: v for k, v in r.items() if k in PRODUCT_FIELDS}) for r in rows]
    with store_errors(db, "import products"):
        db.add_all(products)
        db.commit()
        for p in products:
            db.refresh(p)
    return products


def update_product(db: Session, product_id: int, fields: Mapping) -> Product:
    p = get_product(db, product_id)
    with store_errors(db, "update product"):
        for k, v in fields.items():
            if k in PRODUCT_FIELDS:
                setattr(p, k, v)
        db.commit()
        db.refresh(p)
    return p


def set_product_quantity(db: Session, product_id: int, quantity: int) -> None:
    # last write wins, no version check
    p = get_product(db, product_id)
    with store_errors(db, "update product quantity"):
        p.quantity = quantity
        db.commit()


def delete_product(db: Session, product_id: int) -> None:
    p = get_product(db, product_id)
    with store_errors(db, "delete product"):
        db.delete(p)
        db.commit()


def count_products(db: Session) -> int:
    with store_errors(db, "count products"):
        return db.query(func.count(Product.id)).scalar() or 0


def count_products_expiring(db: Session, start: date, end: date) -> int:
    with store_errors(db, "count expiring products"):
        return (
            db.query(func.count(Product.id))
            .filter(Product.expiry_date >= start, Product.expiry_date <= end)
            .scalar()
            or 0
        )


# ---------- ACTION HISTORY (append-only) ----------

def list_history(
    db: Session,
    action_type: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[ActionHistory]:
    """Newest first, optionally only one action type."""
    with store_errors(db, "list action history"):
        q = db.query(ActionHistory).order_by(ActionHistory.created_at.desc(), ActionHistory.id.desc())
        if action_type is not None:
            q = q.filter(ActionHistory.action_type == action_type)
        if limit is not None:
            q = q.limit(limit)
        return q.all()


def donated_product_ids(db: Session) -> Set[int]:
    return {h.product_id for h in list_history(db, DONATION)}


def latest_history_entry(db: Session, product_id: int, action_type: str) -> Optional[ActionHistory]:
    with store_errors(db, "load action history"):
        return (
            db.query(ActionHistory)
            .filter(ActionHistory.product_id == product_id, ActionHistory.action_type == action_type)
            .order_by(ActionHistory.created_at.desc(), ActionHistory.id.desc())
            .first()
        )


def count_history(db: Session, action_type: str) -> int:
    with store_errors(db, "count action history"):
        return (
            db.query(func.count(ActionHistory.id))
            .filter(ActionHistory.action_type == action_type)
            .scalar()
            or 0
        )


def append_history_entry(
    db: Session,
    *,
    product_id: int,
    action_type: str,
    discount_percentage: Optional[int],
    reason: str,
    decided_by: Optional[int],
    actor: str,
) -> ActionHistory:
    entry = ActionHistory(
        product_id=product_id,
        action_type=action_type,
        discount_percentage=discount_percentage,
        reason=reason,
        decided_by=decided_by,
        actor=actor,
    )
    with store_errors(db, "record action"):
        db.add(entry)
        db.commit()
        db.refresh(entry)
    return entry


def products_by_id(db: Session, product_ids: Iterable[int]) -> dict:
    """id -> Product for the ids that still exist."""
    ids = set(product_ids)
    if not ids:
        return {}
    with store_errors(db, "load products"):
        return {p.id: p for p in db.query(Product).filter(Product.id.in_(ids)).all()}
