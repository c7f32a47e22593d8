# backend/expiryguard/seed.py
#
#   python -m expiryguard.seed            users + sample products (DEV ONLY: wipes products)
#   python -m expiryguard.seed --users    users only
#
# then serve the API from backend/ with:  uvicorn expiryguard.main:app --reload

import sys
from datetime import timedelta

from sqlalchemy.orm import Session

from expiryguard.core.database import Base, SessionLocal, engine
from expiryguard.core.logger import configure_logging, get_logger
from expiryguard.core.security import hash_password
from expiryguard.models.action_history import ActionHistory  # noqa: F401  (registers the table)
from expiryguard.models.product import Product
from expiryguard.models.user import MANAGER, OPERATOR, User
from expiryguard.services.datemath import utcnow

logger = get_logger(__name__)

# Change these creds anytime (dev defaults)
SEED_USERS = [
    {"username": "manager", "name": "Manager", "role": MANAGER, "password": "manager123"},
    {"username": "operator", "name": "Operator", "role": OPERATOR, "password": "operator123"},
]


def seed_users(db: Session) -> None:
    for s in SEED_USERS:
        existing = db.query(User).filter(User.username == s["username"]).first()
        if existing:
            # force reset so changed defaults take effect
            existing.password_hash = hash_password(s["password"])
            existing.name = s["name"]
            existing.role = s["role"]
            logger.info("Updated user %s (%s)", s["username"], s["role"])
            continue

        db.add(
            User(
                username=s["username"],
                name=s["name"],
                role=s["role"],
                password_hash=hash_password(s["password"]),
            )
        )
        logger.info("Created user %s (%s)", s["username"], s["role"])

    db.commit()


def seed_products(db: Session) -> None:
    today = utcnow().date()

    # wipe existing data (DEV ONLY)
    db.query(Product).delete()
    db.commit()

    db.add_all(
        [
            Product(name="Fresh milk 1L", category="Dairy", quantity=20, price=1.2,
                    expiry_date=today + timedelta(days=5), avg_daily_sales=2.0),
            Product(name="Yogurt 500g", category="Dairy", quantity=5, price=0.9,
                    expiry_date=today + timedelta(days=4), avg_daily_sales=0.0),
            Product(name="Sourdough bread", category="Bakery", quantity=3, price=2.5,
                    expiry_date=today, avg_daily_sales=1.0),
            Product(name="Chicken breast", category="Meat", quantity=10, price=6.4,
                    expiry_date=today + timedelta(days=1), avg_daily_sales=5.0),
            Product(name="Canned beans", category="Canned goods", quantity=40, price=1.1,
                    expiry_date=today + timedelta(days=200), avg_daily_sales=3.0),
        ]
    )
    db.commit()
    logger.info("Sample products seeded")


def main(argv=None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    configure_logging()

    # make sure tables exist
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_users(db)
        if "--users" not in argv:
            seed_products(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
