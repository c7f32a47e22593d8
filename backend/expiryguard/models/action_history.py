from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text, func
from expiryguard.core.database import Base

DISCOUNT = "discount"
DONATION = "donation"
ACTION_TYPES = (DISCOUNT, DONATION)


class ActionHistory(Base):
    """Append-only ledger of confirmed discount/donation decisions."""

    __tablename__ = "action_history"

    __table_args__ = (
        CheckConstraint("action_type IN ('discount', 'donation')", name="ck_action_type"),
        # percentage only for discounts, and then within 1..100
        CheckConstraint(
            "(action_type = 'discount' AND discount_percentage BETWEEN 1 AND 100)"
            " OR (action_type = 'donation' AND discount_percentage IS NULL)",
            name="ck_discount_percentage",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    # no FK on purpose: products are hard deleted and the entry must survive
    product_id = Column(Integer, nullable=False, index=True)

    # what was decided
    action_type = Column(String, nullable=False, index=True)
    discount_percentage = Column(Integer, nullable=True)

    # engine justification, snapshotted at decision time
    reason = Column(Text, nullable=True)

    # who
    decided_by = Column(Integer, nullable=True)
    actor = Column(String, nullable=False, default="system")

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
