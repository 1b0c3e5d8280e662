"""Auth API — registration, login, current user.

Learn: Routes for user authentication:
- POST /auth/register → create an account, returns a token right away
- POST /auth/login → email/password → token
- GET /auth/me → current user info (protected)

Services return either an AuthSession or a Failure; a Failure is turned
into its ApiError here and rendered by the central error handlers.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.auth.dependencies import (
    CurrentIdentity,
    get_current_user,
    get_token_service,
)
from tasktrack.auth.jwt import TokenService
from tasktrack.db.engine import get_db
from tasktrack.errors import Failure
from tasktrack.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    UserPublic,
)
from tasktrack.services.auth_service import AuthService
from tasktrack.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _auth_svc(
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    rounds = request.app.state.settings.bcrypt_rounds
    return AuthService(UserService(db, bcrypt_rounds=rounds), tokens)


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, svc: AuthService = Depends(_auth_svc)):
    """Create a new user account and sign them in."""
    result = await svc.register(body.username, body.email, body.password)
    if isinstance(result, Failure):
        raise result.to_error()

    return AuthResponse(
        message="User registered successfully",
        token=result.token,
        user=UserPublic.model_validate(result.user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(_auth_svc)):
    """Login with email and password → bearer token."""
    result = await svc.login(body.email, body.password)
    if isinstance(result, Failure):
        raise result.to_error()

    return AuthResponse(
        message="Login successful",
        token=result.token,
        user=UserPublic.model_validate(result.user),
    )


@router.get("/me", response_model=MeResponse)
async def get_me(identity: CurrentIdentity = Depends(get_current_user)):
    """Get the current authenticated user's info."""
    return MeResponse(
        user=UserPublic(
            id=identity.user_id,
            username=identity.username,
            email=identity.email,
        )
    )
