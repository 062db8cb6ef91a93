"""
Authentication API endpoints
- Registration, login, logout and the current user
- Password change
- CSRF token issuance (GET /api/csrf-token)
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kalakari.core import csrf
from kalakari.core.auth import create_access_token, get_current_user, hash_password, verify_password
from kalakari.core.config import settings
from kalakari.core.database import get_db
from kalakari.domain.artisan import ArtisanPrivate
from kalakari.domain.common import envelope
from kalakari.domain.user import (
    AddressOut,
    LoginRequest,
    PasswordChangeRequest,
    RegisterRequest,
    UserOut,
)
from kalakari.models import User
from kalakari.repositories import ArtisanRepository, UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])
session_router = APIRouter(prefix="/api", tags=["Authentication"])


def _set_auth_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.JWT_EXPIRES_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    """Create a customer or artisan account and start a session"""
    users = UserRepository(db)

    if users.find_by_email(payload.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")

    user = User(
        name=payload.name.strip(),
        email=payload.email.lower(),
        phone=payload.phone,
        password_hash=hash_password(payload.password),
        role=payload.role,
    )
    try:
        users.add(user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")

    token = create_access_token(user.id, user.role)
    _set_auth_cookie(response, token)
    logger.info(f"New {user.role} registered: user {user.id}")

    return envelope({"user": UserOut.model_validate(user).model_dump(mode="json"), "token": token},
                    message="User registered successfully")


@router.post("/login")
async def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = UserRepository(db).find_by_email(payload.email)

    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account has been deactivated")

    token = create_access_token(user.id, user.role)
    _set_auth_cookie(response, token)

    return envelope({"user": UserOut.model_validate(user).model_dump(mode="json"), "token": token},
                    message="Login successful")


@router.get("/me")
async def me(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Current user with saved addresses, plus the artisan profile for artisans"""
    data = UserOut.model_validate(user).model_dump(mode="json")
    data["addresses"] = [AddressOut.model_validate(a).model_dump() for a in user.addresses]

    artisan_profile = None
    if user.role == "artisan":
        artisan = ArtisanRepository(db).find_by_user_id(user.id)
        if artisan:
            artisan_profile = ArtisanPrivate.from_model(artisan).to_dict()

    return envelope({"user": data, "artisan_profile": artisan_profile})


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return envelope(message="Logged out successfully")


@router.put("/password")
async def change_password(
    payload: PasswordChangeRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not verify_password(payload.current_password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")

    user.password_hash = hash_password(payload.new_password)
    db.commit()
    logger.info(f"Password changed for user {user.id}")

    return envelope(message="Password updated successfully")


@session_router.get("/csrf-token")
async def get_csrf_token(request: Request, response: Response):
    """Issue a CSRF token bound to the caller's session cookie (created if absent)"""
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not session_id:
        session_id = csrf.new_session_id()
        response.set_cookie(
            key=settings.SESSION_COOKIE_NAME,
            value=session_id,
            httponly=True,
            secure=settings.is_production,
            samesite="none" if settings.is_production else "lax",
        )

    return {
        "success": True,
        "csrfToken": csrf.generate_token(session_id),
        "message": "CSRF token generated successfully",
    }
