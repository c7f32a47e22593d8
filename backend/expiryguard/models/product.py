from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Date,
    DateTime,
    CheckConstraint,
    Index,
)
from datetime import datetime, timezone
from expiryguard.core.database import Base

# the UI's category dropdown; free text is accepted as well
CATEGORIES = ["Dairy", "Meat", "Fruit & Vegetables", "Bakery", "Canned goods", "Other"]
DEFAULT_CATEGORY = "Other"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    __table_args__ = (
        # SAFETY CONSTRAINTS
        CheckConstraint("quantity >= 0", name="ck_quantity_non_negative"),
        CheckConstraint("avg_daily_sales >= 0", name="ck_sales_non_negative"),
        CheckConstraint("price >= 0", name="ck_price_non_negative"),

        # PERFORMANCE INDEXES
        Index("ix_products_expiry_date", "expiry_date"),
    )

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String, nullable=False)
    category = Column(String, nullable=False, default=DEFAULT_CATEGORY)

    quantity = Column(Integer, nullable=False, default=0)
    expiry_date = Column(Date, nullable=False)

    avg_daily_sales = Column(Float, nullable=False, default=0.0)
    price = Column(Float, nullable=False, default=0.0)

    # users.id of whoever added the row (manual or CSV)
    created_by = Column(Integer, nullable=True)

    # timestamps
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(
        DateTime,
        default=_utcnow,
        onupdate=_utcnow,
    )
