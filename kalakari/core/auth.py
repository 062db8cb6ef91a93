"""
Authentication for the Kalakari API

Issues and validates JWTs (HS256) carried in the HTTP-only auth cookie or an
`Authorization: Bearer` header, and provides role-based dependencies.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from jose.exceptions import ExpiredSignatureError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from kalakari.core.config import settings
from kalakari.core.database import get_db
from kalakari.models import User


# Security scheme for bearer tokens (cookie is checked first)
security = HTTPBearer(auto_error=False)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ROLES = ("customer", "artisan", "admin")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(user_id: int, role: str, expires_days: Optional[int] = None, fixture: bool = False) -> str:
    """
    Sign a session token for a user

    `fixture` tokens identify in-memory dev fixture users; they are never
    accepted for database users.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "id": user_id,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": now + timedelta(days=expires_days or settings.JWT_EXPIRES_DAYS),
    }
    if fixture:
        payload["fixture"] = True
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and validate a session token.

    Raises 401 for expired or malformed tokens.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"}
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token.",
            headers={"WWW-Authenticate": "Bearer"}
        )


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Auth cookie first, then bearer header"""
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        return token
    if credentials:
        return credentials.credentials
    return None


def _load_user(db: Session, payload: dict) -> Optional[User]:
    if payload.get("fixture"):
        return None

    user_id = payload.get("id") or payload.get("sub")
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        return None

    user = db.get(User, user_id)
    if not user or not user.is_active:
        return None
    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency that resolves the authenticated user.

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"message": f"Hello {user.email}"}
    """
    token = extract_token(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = decode_access_token(token)
    user = _load_user(db, payload)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is no longer valid.",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return user


async def get_current_user_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Optional authentication - returns None if no valid token provided."""
    token = extract_token(request, credentials)
    if not token:
        return None

    try:
        payload = decode_access_token(token)
    except HTTPException:
        return None

    return _load_user(db, payload)


def require_roles(*roles: str):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.put("/admin/users/{user_id}/status")
        async def set_status(user: User = Depends(require_roles("admin"))):
            ...
    """
    async def role_checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {', '.join(roles)}"
            )
        return user

    return role_checker


# Convenience dependencies for common role requirements
require_customer = require_roles("customer")
require_artisan = require_roles("artisan")
require_admin = require_roles("admin")
