# server/askbudi/routes/auth.py
import logging
import secrets

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from askbudi.auth import create_jwt, hash_password, verify_password
from askbudi.config import settings
from askbudi.database import get_db
from askbudi.errors import AuthError, ValidationError
from askbudi.models import User
from askbudi.profiles import get_or_create_profile
from askbudi.schemas import LoginRequest, LoginResponse, SignupRequest, SignupResponse
from askbudi.timeutil import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/auth", tags=["auth"])


def generate_user_id() -> str:
    return f"usr_{secrets.token_hex(12)}"


@router.post("/signup", response_model=SignupResponse)
def signup(request: SignupRequest, db: Session = Depends(get_db)):
    """Create a new account and start a session."""
    existing = db.query(User).filter(User.email == request.email).first()
    if existing:
        raise ValidationError("Email already registered")

    user = User(
        id=generate_user_id(),
        email=request.email,
        password_hash=hash_password(request.password),
        created_at=utcnow(),
    )
    db.add(user)
    db.commit()

    get_or_create_profile(db, user.id)
    logger.info("Signed up user %s", user.id)

    return SignupResponse(
        user_id=user.id,
        token=create_jwt(user.id),
        expires_in=settings.jwt_expiry_seconds,
    )


@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Login and get a session token."""
    user = db.query(User).filter(User.email == request.email).first()

    if not user or not verify_password(request.password, user.password_hash):
        raise AuthError("Invalid credentials")

    return LoginResponse(
        token=create_jwt(user.id),
        expires_in=settings.jwt_expiry_seconds,
    )
