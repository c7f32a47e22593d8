# backend/expiryguard/api/routes.py

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from sqlalchemy.orm import Session
from datetime import date, datetime
import csv
import io

from expiryguard.api.deps_auth import CurrentUser, ensure_manager, get_current_user, get_db, require_manager
from expiryguard.core.config import settings
from expiryguard.core.errors import ValidationError
from expiryguard.core.logger import get_logger
from expiryguard.models.action_history import DISCOUNT
from expiryguard.models.product import DEFAULT_CATEGORY
from expiryguard.services import store
from expiryguard.services.classifier import Suggestion
from expiryguard.services.csv_import import parse_product_csv
from expiryguard.services.datemath import days_until, utcnow
from expiryguard.services.suggestions import confirm_action, dashboard_counts, load_risk_zone

router = APIRouter()

logger = get_logger(__name__)

DELETED_PRODUCT = "Deleted product"

# ---------- SCHEMAS ----------

Action = Literal["discount", "donation"]
ExpiryStatus = Literal["expired", "at_risk", "ok"]


class Product(BaseModel):
    id: int
    name: str
    category: str
    quantity: int
    expiry_date: date
    avg_daily_sales: float
    price: float

    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductRow(Product):
    days_left: int
    expiry_status: ExpiryStatus


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    category: str = DEFAULT_CATEGORY
    quantity: int = Field(0, ge=0)
    expiry_date: date
    avg_daily_sales: float = Field(0.0, ge=0)
    price: float = Field(0.0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    expiry_date: Optional[date] = None
    avg_daily_sales: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)


class ImportResult(BaseModel):
    imported: int
    skipped: int


class SuggestionOut(BaseModel):
    product: Product
    action: Action
    reason: str
    days_left: int
    already_donated: bool


class ConfirmIn(BaseModel):
    action: Action
    # discount only; defaults to 30 when left out
    discount_percentage: Optional[int] = None


class HistoryOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    product_category: Optional[str] = None

    action_type: Action
    discount_percentage: Optional[int] = None
    reason: Optional[str] = None

    decided_by: Optional[int] = None
    actor: str
    created_at: Optional[datetime] = None


class DashboardOut(BaseModel):
    total_products: int
    risk_products: int
    discounted: int
    donated: int

# ---------- HELPERS ----------

def _product_row(p, now) -> ProductRow:
    days_left = days_until(p.expiry_date, now)
    if days_left < 0:
        expiry_status = "expired"
    elif days_left <= settings.dashboard_risk_horizon_days:
        expiry_status = "at_risk"
    else:
        expiry_status = "ok"

    return ProductRow(
        **Product.model_validate(p).model_dump(),
        days_left=days_left,
        expiry_status=expiry_status,
    )


def _suggestion_out(s: Suggestion) -> SuggestionOut:
    return SuggestionOut(
        product=Product.model_validate(s.product),
        action=s.action,
        reason=s.reason,
        days_left=s.days_left,
        already_donated=s.already_donated,
    )


def _history_out(h, products: dict) -> HistoryOut:
    p = products.get(h.product_id)
    return HistoryOut(
        id=h.id,
        product_id=h.product_id,
        product_name=p.name if p else DELETED_PRODUCT,
        product_category=p.category if p else None,
        action_type=h.action_type,
        discount_percentage=h.discount_percentage,
        reason=h.reason,
        decided_by=h.decided_by,
        actor=h.actor,
        created_at=h.created_at,
    )

# ---------- ROUTES ----------

@router.get("/ping")
def ping():
    return {"message": "pong"}

# ---------- PRODUCTS (any signed-in user can read and add) ----------

@router.get("/products", response_model=List[ProductRow])
def list_products(
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
):
    now = utcnow()
    return [_product_row(p, now) for p in store.list_products(db)]


@router.post("/products", response_model=Product)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    name = payload.name.strip()
    if not name:
        raise ValidationError("Product name is required")

    fields = payload.model_dump()
    fields.update(name=name, category=(payload.category or "").strip() or DEFAULT_CATEGORY, created_by=user.id)

    p = store.create_product(db, fields)
    logger.info("Product %s '%s' created by %s", p.id, p.name, user.display_name)
    return p


@router.post("/products/import", response_model=ImportResult)
def import_products(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    raw = file.file.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError("CSV file must be UTF-8 encoded")

    rows, skipped = parse_product_csv(text, created_by=user.id)
    if not rows:
        raise ValidationError("CSV file has no valid rows")

    store.create_products(db, rows)
    logger.info("Imported %d product(s) from %s by %s", len(rows), file.filename, user.display_name)
    return ImportResult(imported=len(rows), skipped=skipped)

# ---------- PRODUCTS (manager only can change/delete) ----------

@router.patch("/products/{product_id}", response_model=Product)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_manager),
):
    # null means "leave as is"; every product column is NOT NULL except created_by
    fields = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if "name" in fields:
        fields["name"] = (fields["name"] or "").strip()
        if not fields["name"]:
            raise ValidationError("Product name is required")

    p = store.update_product(db, product_id, fields)
    logger.info("Product %s updated by %s: %s", product_id, user.display_name, sorted(fields))
    return p


@router.delete("/products/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_manager),
):
    # hard delete; history entries keep pointing at the old id
    store.delete_product(db, product_id)
    logger.info("Product %s deleted by %s", product_id, user.display_name)
    return {"ok": True}

# ---------- RISK ZONE ----------

@router.get("/risk-zone", response_model=List[SuggestionOut])
def risk_zone(
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
):
    return [_suggestion_out(s) for s in load_risk_zone(db)]


@router.get("/risk-zone.csv")
def risk_zone_csv(
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
):
    buf = io.StringIO()
    w = csv.writer(buf)
    w.writerow(
        [
            "name",
            "category",
            "quantity",
            "expiry_date",
            "days_left",
            "avg_daily_sales",
            "action",
            "already_donated",
            "reason",
        ]
    )

    for s in load_risk_zone(db):
        p = s.product
        w.writerow(
            [
                p.name,
                p.category or "",
                p.quantity,
                p.expiry_date.isoformat(),
                s.days_left,
                p.avg_daily_sales,
                s.action,
                s.already_donated,
                s.reason,
            ]
        )

    return StreamingResponse(
        io.BytesIO(buf.getvalue().encode("utf-8")),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="risk_zone.csv"'},
    )


@router.post("/risk-zone/{product_id}/confirm", response_model=HistoryOut)
def confirm(
    product_id: int,
    payload: ConfirmIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    # operators may mark donations, discounts need a manager
    if payload.action == DISCOUNT:
        ensure_manager(user)

    entry = confirm_action(
        db,
        product_id,
        payload.action,
        payload.discount_percentage,
        actor=user.display_name,
        decided_by=user.id,
    )
    return _history_out(entry, store.products_by_id(db, [product_id]))

# ---------- ACTION HISTORY (read only) ----------

@router.get("/history", response_model=List[HistoryOut])
def list_history(
    action: Optional[Action] = None,
    limit: int = 50,
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
):
    limit = max(1, min(limit, 200))

    entries = store.list_history(db, action, limit)
    products = store.products_by_id(db, {h.product_id for h in entries})
    return [_history_out(h, products) for h in entries]

# ---------- DASHBOARD ----------

@router.get("/dashboard", response_model=DashboardOut)
def dashboard(
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
):
    return DashboardOut(**dashboard_counts(db))
