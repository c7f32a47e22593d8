# backend/expiryguard/api/auth_routes.py

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm

from expiryguard.api.deps_auth import CurrentUser, get_db, get_current_user
from expiryguard.core.logger import get_logger
from expiryguard.core.security import verify_password, create_access_token
from expiryguard.models.user import User

router = APIRouter()

logger = get_logger(__name__)


class LoginIn(BaseModel):
    username: str
    password: str


class UserOut(BaseModel):
    id: int
    username: str
    name: str
    role: str

    class Config:
        from_attributes = True


class LoginOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


def _authenticate(db: Session, username: str, password: str) -> LoginOut:
    username = (username or "").strip()

    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login for '%s'", username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    token = create_access_token({"sub": str(user.id), "role": user.role})

    return LoginOut(
        access_token=token,
        user=UserOut.model_validate(user),
    )


# JSON login (what the dashboard uses)
@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    return _authenticate(db, payload.username, payload.password)


# OAuth2 form endpoint (Swagger Authorize uses this)
@router.post("/token", response_model=LoginOut)
def token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    return _authenticate(db, form_data.username, form_data.password or "")


@router.get("/me", response_model=UserOut)
def me(current_user: CurrentUser = Depends(get_current_user)):
    return UserOut.model_validate(current_user.model_dump())
