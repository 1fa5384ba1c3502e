"""
api/routes/v1/auth.py -- Registration, login, and identity REST endpoints.

Routes:
  POST /api/v1/auth/register   -- create an account; 201
  POST /api/v1/auth/login      -- exchange credentials for a bearer token; 200
  GET  /api/v1/auth/me         -- profile of the token's owner (requires auth)

Security:
  [H2] POST /login and POST /register are rate-limited to 10 requests/minute
       per IP.
  [C1] AuthService.login() equalizes timing between unknown usernames and
       wrong passwords -- route code must not pre-check the username itself.
  [M5] Cache-Control: no-store on login responses.
  Responses are built from UserResponse, which has no password field.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from auth.dependencies import get_auth_service, get_current_user
from auth.models import LoginCommand, RegisterCommand, User
from auth.service import AuthService

# Auth policy:
# - POST /api/v1/auth/register: public -- account creation is open
# - POST /api/v1/auth/login:    public -- login endpoint must be unauthenticated
# - GET  /api/v1/auth/me:       requires auth (get_current_user)
router = APIRouter()

# @limiter.limit sits directly above the def and below @router: the router must
# register the limited wrapper, not the bare function.


@router.post("/auth/register", response_model=UserResponse, status_code=201)
@limiter.limit("10/minute")
def register(
    request: Request,
    body: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Create a new account.

    409 if the username or the email is already registered.
    """
    user = auth_service.register(
        RegisterCommand(username=body.username, email=body.email, password=body.password)
    )
    return UserResponse.from_user(user)


@router.post("/auth/login", response_model=LoginResponse)
@limiter.limit("10/minute")  # [H2] brute-force mitigation
def login(
    request: Request,
    body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Authenticate with username and password; return a bearer token.

    Wrong username and wrong password produce the same 401 body. The
    UnauthorizedError propagates to the app-level handler; the no-store header
    only matters on the success path, where a token is in the body.
    """
    result = auth_service.login(LoginCommand(username=body.username, password=body.password))
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            token=result.token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=result.expires_in,
            user=UserResponse.from_user(result.user),
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.get("/auth/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the profile of the currently authenticated user."""
    return UserResponse.from_user(current_user)
