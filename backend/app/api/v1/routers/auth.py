import logging
from fastapi import APIRouter, HTTPException, Response, status, Depends
from tortoise.exceptions import IntegrityError
from app.core.errors import Conflict, run_bounded
from app.core.security import verify_password, create_access_token, hash_password
from app.api.v1.deps import get_current_user
from app.models.user import User
from app.schemas.auth import GithubSignInIn, LoginRequest, LoginResponse, RegisteredOut, RegisterIn, UserOut
from app.schemas.common import Envelope
from app.services.github_oauth import sign_in_with_github
from app.services.serializers import user_to_dict

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/auth", tags=["auth"])

def _issue_token(user: User, response: Response) -> dict:
    token = create_access_token(str(user.id))
    response.set_cookie("accessToken", token, httponly=True, secure=False, samesite="lax")
    return {"success": True, "data": {"user": user_to_dict(user), "accessToken": token}}

@router.post("/register", response_model=Envelope[RegisteredOut], status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn):
    """
    Register a new credentials account.

    Args:
        body: Request body containing:
            - name: str
            - email: str (must be unique)
            - password: str (will be hashed before storage)

    Returns:
        dict: {success, data: {id, name, email}}

    Raises:
        400: Missing fields
        409: Email already registered (EMAIL_EXISTS)
    """
    email = body.email.strip().lower()
    if await User.get_or_none(email=email):
        raise Conflict("User with this email already exists", code="EMAIL_EXISTS")
    try:
        u = await User.create(
            name=body.name.strip(),
            email=email,
            password_hash=hash_password(body.password),
            provider="credentials",
        )
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        raise Conflict("User with this email already exists", code="EMAIL_EXISTS")
    logger.info("[auth] registered user=%s", u.id)
    return {"success": True, "data": {"id": str(u.id), "name": u.name, "email": u.email}}

@router.post("/login", response_model=Envelope[LoginResponse])
async def login(payload: LoginRequest, response: Response):
    """
    Authenticate with email and password and create an access token.

    The token is returned in the response body and also set as an HttpOnly
    cookie for browser-based clients.

    Raises:
        HTTPException (401): If credentials are invalid (AUTH_INVALID_CREDENTIALS)
    """
    user = await User.get_or_none(email=payload.email.strip().lower())
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail={"code": "AUTH_INVALID_CREDENTIALS", "message": "Incorrect email or password"})
    return _issue_token(user, response)

@router.post("/github", response_model=Envelope[LoginResponse])
async def github_sign_in(body: GithubSignInIn, response: Response):
    """
    Sign in with a GitHub OAuth authorization code.

    The first sign-in for an email creates an account with provider "github".

    Raises:
        401: Code exchange failed or the GitHub account has no usable email (AUTH_GITHUB_FAILED)
    """
    user = await run_bounded(sign_in_with_github(body.code))
    return _issue_token(user, response)

@router.get("/me", response_model=Envelope[UserOut])
async def me(user: User = Depends(get_current_user)):
    """
    Get current authenticated user information.

    Raises:
        HTTPException (401): If user is not authenticated
    """
    return {"success": True, "data": user_to_dict(user)}

@router.post("/logout")
async def logout(response: Response):
    """
    Log out the current user by clearing the access token cookie.

    Note:
        This endpoint only clears the cookie. The JWT token itself remains
        valid until it expires.
    """
    response.delete_cookie("accessToken")
    return {"success": True}
