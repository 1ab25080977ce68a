"""
Authentication routes.
POST /auth/register, /auth/login, /auth/refresh, /auth/logout
"""
from fastapi import APIRouter, Request, status

from app.core.config import settings
from app.core.dependencies import CurrentUser, DBSession
from app.core.rate_limit import limiter
from app.schemas.response import ApiResponse
from app.schemas.user import LoginRequest, ProfileRead, RefreshTokenRequest, Token, UserCreate
from app.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=ApiResponse[ProfileRead],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register(
    user_in: UserCreate,
    db: DBSession,
) -> ApiResponse[ProfileRead]:
    user = await auth_service.register_user(db, user_in=user_in)
    return ApiResponse(
        data=ProfileRead.model_validate(user.profile),
        message="Account created successfully",
    )


@router.post(
    "/login",
    response_model=ApiResponse[Token],
    summary="Authenticate and receive JWT token pair",
)
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def login(
    request: Request,
    credentials: LoginRequest,
    db: DBSession,
) -> ApiResponse[Token]:
    token = await auth_service.authenticate_user(
        db, email=credentials.email, password=credentials.password
    )
    return ApiResponse(data=token)


@router.post(
    "/refresh",
    response_model=ApiResponse[Token],
    summary="Refresh access token using a valid refresh token",
)
async def refresh(
    body: RefreshTokenRequest,
    db: DBSession,
) -> ApiResponse[Token]:
    token = await auth_service.refresh_access_token(db, refresh_token=body.refresh_token)
    return ApiResponse(data=token)


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    summary="Invalidate the current refresh token",
)
async def logout(
    current_user: CurrentUser,
    db: DBSession,
) -> ApiResponse[None]:
    await auth_service.logout(db, user=current_user)
    return ApiResponse(message="Logged out successfully")
