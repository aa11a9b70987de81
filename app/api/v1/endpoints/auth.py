from fastapi import APIRouter, HTTPException, status

from app.api.deps import DB, CurrentUser
from app.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    AuthResponse,
    UserResponse,
)
from app.services.auth_service import AuthService

router = APIRouter(tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: DB,
):
    """
    Create an account and sign it in.

    New accounts are staff unless admin is requested and admin signup is enabled.
    """
    auth_service = AuthService(db)

    user = await auth_service.register_user(
        name=data.name,
        email=data.email,
        password=data.password,
        role=data.role,
    )
    access_token, expires_in = await auth_service.create_tokens(user)

    return AuthResponse(
        user=UserResponse.model_validate(user),
        access_token=access_token,
        token_type="bearer",
        expires_in=expires_in,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    db: DB,
):
    """
    Authenticate user and return an access token.
    """
    auth_service = AuthService(db)

    user = await auth_service.authenticate_user(data.email, data.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token, expires_in = await auth_service.create_tokens(user)

    return AuthResponse(
        user=UserResponse.model_validate(user),
        access_token=access_token,
        token_type="bearer",
        expires_in=expires_in,
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: CurrentUser,
):
    """Get current user information."""
    return UserResponse.model_validate(current_user)
