# server/askbudi/auth.py
import bcrypt
import jwt
from datetime import timedelta
from typing import Optional
from fastapi import Header, Depends
from sqlalchemy.orm import Session
from askbudi.config import settings
from askbudi.database import get_db
from askbudi.errors import AuthError
from askbudi.models import User
from askbudi.timeutil import utcnow


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


def create_jwt(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a session token for a user."""
    if expires_delta is None:
        expires_delta = timedelta(seconds=settings.jwt_expiry_seconds)
    now = utcnow()
    payload = {
        "user_id": user_id,
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_jwt(token: str) -> dict:
    """Decode and verify a session token."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token")


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer`` header, if any."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[7:].strip()
    return token or None


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the session user from the bearer token."""
    token = extract_bearer(authorization)
    if token is None:
        raise AuthError("Unauthorized")

    payload = decode_jwt(token)
    user = db.query(User).filter(User.id == payload.get("user_id")).first()
    if not user:
        raise AuthError("User not found")

    return user
