"""Credential verification: password hashing and access/refresh JWTs."""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.user import User

settings = get_settings()

ACCESS_TOKEN_TYPE = "access"  # noqa: S105
REFRESH_TOKEN_TYPE = "refresh"  # noqa: S105

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def _encode_token(user: User, token_type: str, lifetime: timedelta) -> str:
    issued_at = datetime.now(UTC)
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(user: User) -> str:
    """Short-lived token sent as the bearer credential on every request."""
    return _encode_token(
        user, ACCESS_TOKEN_TYPE, timedelta(minutes=settings.jwt_expiration_minutes)
    )


def create_refresh_token(user: User) -> str:
    """Long-lived token only accepted by the refresh endpoint."""
    return _encode_token(
        user, REFRESH_TOKEN_TYPE, timedelta(minutes=settings.jwt_refresh_expiration_minutes)
    )


def decode_token(token: str, token_type: str) -> dict | None:
    """Decode a JWT, rejecting bad signatures, expiry and tokens of the wrong type."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def _resolve_user(db: Session, token: str, token_type: str) -> User | None:
    payload = decode_token(token, token_type)
    if payload is None:
        return None

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

    return db.get(User, user_id)


def verify_bearer_token(db: Session, token: str) -> User | None:
    """Resolve an access token to its user, or None if the token or user is invalid."""
    return _resolve_user(db, token, ACCESS_TOKEN_TYPE)


def verify_refresh_token(db: Session, token: str) -> User | None:
    """Resolve a refresh token to its user, or None if it cannot be used."""
    return _resolve_user(db, token, REFRESH_TOKEN_TYPE)


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email (case-insensitive)."""
    return db.query(User).filter(User.email == email.lower()).first()


def create_user(db: Session, email: str, password: str, name: str | None = None) -> User:
    """Create a new user. Emails are stored lowercased."""
    user = User(email=email.lower(), password_hash=get_password_hash(password), name=name)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
