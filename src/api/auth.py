"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user
from src.config import get_settings
from src.database import get_db
from src.models.user import User
from src.schemas.auth import (
    AuthResponse,
    RefreshTokenRequest,
    UserLogin,
    UserRegister,
    UserResponse,
)
from src.services.auth import (
    authenticate_user,
    create_access_token,
    create_refresh_token,
    create_user,
    get_user_by_email,
    verify_refresh_token,
)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def issue_session(user: User) -> AuthResponse:
    """Build a fresh access/refresh token pair for the user."""
    return AuthResponse(
        access_token=create_access_token(user),
        refresh_token=create_refresh_token(user),
        expires_in=get_settings().jwt_expiration_minutes * 60,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: Annotated[Session, Depends(get_db)],
):
    """Create an account and sign it in."""
    if get_user_by_email(db, user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    return issue_session(create_user(db, user_data.email, user_data.password, user_data.name))


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with email and password."""
    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return issue_session(user)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(
    request: RefreshTokenRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """Trade a refresh token for a new session."""
    user = verify_refresh_token(db, request.refresh_token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token refresh failed",
        )

    return issue_session(user)


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user


@router.post("/logout")
async def logout(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Stateless logout; the client drops both tokens."""
    return {"message": "Logged out successfully"}
