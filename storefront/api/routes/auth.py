# storefront/api/routes/auth.py
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Response
from fastapi.security import OAuth2PasswordRequestForm

from storefront.api.deps import get_db, get_current_user
from storefront.api.schemas.user import LoginResponse, TokenResponse, UserCreate, UserLogin, UserOut
from storefront.config import settings
from storefront.core.security import create_access_token, hash_password, verify_password
from storefront.database import FileBackedDB
from storefront.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _authenticate(db: FileBackedDB, email: str, password: str) -> Optional[User]:
    row = db.get_record("users", "email", email.strip().lower())
    if not row:
        return None
    user = User.from_dict(row)
    if not verify_password(password, user.password_hash):
        return None
    return user


def _user_out(user: User) -> Dict[str, Any]:
    return {"id": user.id, "name": user.name, "email": user.email, "is_admin": user.is_admin}


@router.post("/signup", response_model=UserOut, status_code=201)
def signup(payload: UserCreate, db: FileBackedDB = Depends(get_db)):
    """
    Register a shopper account. Emails are unique (case-insensitive).
    """
    email = str(payload.email).lower()
    if db.get_record("users", "email", email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")
    user = User(
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        is_admin=False,
        created_at=datetime.utcnow().isoformat(sep=" "),
    )
    row = db.create_record("users", user.to_dict(), id_field="id")
    return _user_out(User.from_dict(row))


@router.post("/login", response_model=LoginResponse)
def login(payload: UserLogin, response: Response, db: FileBackedDB = Depends(get_db)):
    """
    JSON login used by the web client: returns the token and also sets it as
    an http-only cookie so browser requests are authenticated automatically.
    """
    user = _authenticate(db, str(payload.email), payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email or password")
    token = create_access_token(subject=user.id)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return {"message": "Login successful", "token": token, "user": _user_out(user)}


@router.post("/token", response_model=TokenResponse)
def token(form_data: OAuth2PasswordRequestForm = Depends(), db: FileBackedDB = Depends(get_db)):
    """
    Token endpoint used by OAuth2PasswordRequestForm clients (e.g. the API docs).
    The form's username field carries the email.
    """
    user = _authenticate(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return {"access_token": create_access_token(subject=user.id), "token_type": "bearer"}


@router.get("/me")
def me(current_user: Dict[str, Any] = Depends(get_current_user)):
    return {"user": _user_out(User.from_dict(current_user))}


@router.get("/logout")
def logout(response: Response, current_user: Dict[str, Any] = Depends(get_current_user)):
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return {"message": "Logged out successfully"}
