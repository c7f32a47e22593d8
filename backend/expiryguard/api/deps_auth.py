# backend/expiryguard/api/deps_auth.py

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel
from sqlalchemy.orm import Session

from expiryguard.core.database import SessionLocal
from expiryguard.core.security import decode_token
from expiryguard.models.user import MANAGER, User as UserModel

# Only used by Swagger UI for the "Authorize" flow.
# It does NOT affect normal Authorization: Bearer <token> parsing.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")


class CurrentUser(BaseModel):
    id: int
    username: str
    name: str
    role: str  # "manager" | "operator"

    @property
    def display_name(self) -> str:
        return self.name or self.username


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> CurrentUser:
    cred_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )

    # token must be the raw JWT (OAuth2PasswordBearer strips "Bearer ")
    if not token or not isinstance(token, str):
        raise cred_exc

    try:
        payload = decode_token(token)
    except ValueError:
        raise cred_exc

    sub = payload.get("sub")
    if not sub:
        raise cred_exc

    # sub is the user id
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise cred_exc

    user = db.get(UserModel, user_id)
    if not user:
        raise cred_exc

    return CurrentUser(
        id=user.id,
        username=user.username,
        name=user.name,
        role=user.role,
    )


def ensure_manager(user: CurrentUser) -> None:
    if user.role != MANAGER:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Manager role required")


def require_manager(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    ensure_manager(user)
    return user
