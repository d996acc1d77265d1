# app/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request/response models for registration, login and user information.
"""
from typing import Optional
from pydantic import BaseModel, Field

class RegisterIn(BaseModel):
    """
    Request model for credential registration.
    All three fields are required; the password is hashed server-side.
    """
    name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=1)

class LoginRequest(BaseModel):
    """
    Request model for user login endpoint.
    Contains credentials for authentication.
    """
    email: str  # Login email
    password: str  # User password (plain text, verified against the stored hash)

class GithubSignInIn(BaseModel):
    """OAuth authorization code returned to the client by GitHub."""
    code: str = Field(min_length=1)

class RegisteredOut(BaseModel):
    """Account created by /auth/register; no token is issued."""
    id: str
    name: str
    email: str

class UserOut(BaseModel):
    """
    User information model returned in authentication responses.
    Contains basic user details without sensitive information.
    """
    id: str  # User unique identifier
    name: str
    email: str
    image: Optional[str] = None
    provider: str = "credentials"  # "credentials" or "github"

class LoginResponse(BaseModel):
    """
    Response model for successful login.
    Returns user information and access token for authenticated requests.
    """
    user: UserOut  # User information object
    accessToken: str  # JWT access token for API authentication
