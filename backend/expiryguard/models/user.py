from sqlalchemy import Column, Integer, String
from expiryguard.core.database import Base

MANAGER = "manager"
OPERATOR = "operator"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    username = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)

    # "manager" | "operator"
    role = Column(String, nullable=False, default=OPERATOR)

    password_hash = Column(String, nullable=False)
