# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /api/auth/register  - Create account, returns token
#   POST /api/auth/login     - Verify credentials, returns token
#   GET  /api/auth/me        - Get current user
#
# =============================================================================

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from inkpress.api.deps import get_accounts, get_tokens
from inkpress.api.responses import ok
from inkpress.auth.context import AuthContext
from inkpress.auth.jwt import TokenService
from inkpress.auth.policies import require_auth
from inkpress.core.models import UserCreate
from inkpress.services import Accounts
from inkpress.services.accounts import public_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


# =============================================================================
# Request Models
# =============================================================================

class LoginRequest(BaseModel):
    email: str
    password: str


# =============================================================================
# Public Endpoints
# =============================================================================

@router.post("/register", status_code=201)
async def register(
    data: UserCreate,
    accounts: Accounts = Depends(get_accounts),
    tokens: TokenService = Depends(get_tokens),
):
    """
    Create a new account.

    Returns the user and a session token on success.
    """
    user = await accounts.register(data)
    return ok(
        {"user": public_user(user), "token": tokens.issue(user.to_identity())},
        message="User registered successfully",
        status_code=201,
    )


@router.post("/login")
async def login(
    data: LoginRequest,
    accounts: Accounts = Depends(get_accounts),
    tokens: TokenService = Depends(get_tokens),
):
    """
    Authenticate and get a token.
    """
    user = await accounts.authenticate_credentials(data.email, data.password)
    return ok(
        {"user": public_user(user), "token": tokens.issue(user.to_identity())},
        message="Login successful",
    )


# =============================================================================
# Protected Endpoints
# =============================================================================

@router.get("/me")
async def get_current_user(
    ctx: AuthContext = Depends(require_auth()),
    accounts: Accounts = Depends(get_accounts),
):
    """
    Get the current authenticated user.
    """
    user = await accounts.get(ctx.user_id)
    return ok({"user": public_user(user)})
