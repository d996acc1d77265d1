# app/services/github_oauth.py
"""
GitHub sign-in.

Exchanges an OAuth authorization code for an access token, reads the GitHub
profile and maps it onto a local User. The first sign-in for an email creates
the account with provider "github"; later sign-ins reuse it.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from app.config import settings
from app.core.errors import AppError
from app.models.user import User

logger = logging.getLogger("uvicorn.error")


class GithubSignInError(AppError):
    status_code = 401
    code = "AUTH_GITHUB_FAILED"
    message = "GitHub sign-in failed"


@dataclass
class GithubProfile:
    name: str
    email: str
    image: Optional[str] = None


async def _exchange_code(client: httpx.AsyncClient, code: str) -> str:
    if not settings.github_client_id or not settings.github_client_secret:
        raise GithubSignInError("GitHub sign-in is not configured")
    resp = await client.post(
        settings.github_oauth_url,
        headers={"Accept": "application/json"},
        data={
            "client_id": settings.github_client_id,
            "client_secret": settings.github_client_secret,
            "code": code,
        },
    )
    resp.raise_for_status()
    token = resp.json().get("access_token")
    if not token:
        raise GithubSignInError("GitHub did not return an access token")
    return token


async def _primary_email(client: httpx.AsyncClient, headers: dict) -> Optional[str]:
    # Profile email is null when the user keeps it private
    resp = await client.get(f"{settings.github_api_url}/user/emails", headers=headers)
    resp.raise_for_status()
    for item in resp.json():
        if item.get("primary") and item.get("verified"):
            return item.get("email")
    return None


async def fetch_github_profile(code: str) -> GithubProfile:
    """
    Resolve an OAuth code into the signed-in GitHub user's profile.

    Raises:
        GithubSignInError: Not configured, code rejected, or no usable email
    """
    try:
        async with httpx.AsyncClient(timeout=settings.request_timeout_sec) as client:
            token = await _exchange_code(client, code)
            headers = {"Authorization": f"Bearer {token}", "Accept": "application/vnd.github+json"}
            resp = await client.get(f"{settings.github_api_url}/user", headers=headers)
            resp.raise_for_status()
            data = resp.json()
            email = data.get("email") or await _primary_email(client, headers)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("[auth] GitHub request failed: %s", e)
        raise GithubSignInError()

    if not email or not email.strip():
        raise GithubSignInError("GitHub account has no verified email")
    # Same form register/login store, so the account is shared
    email = email.strip().lower()
    return GithubProfile(
        name=data.get("name") or data.get("login") or email.split("@")[0],
        email=email,
        image=data.get("avatar_url"),
    )


async def sign_in_with_github(code: str) -> User:
    """Find or create the local user for a GitHub sign-in."""
    profile = await fetch_github_profile(code)
    user = await User.get_or_none(email=profile.email)
    if user is None:
        user = await User.create(
            name=profile.name,
            email=profile.email,
            image=profile.image,
            provider="github",
        )
        logger.info("[auth] created github user=%s email=%s", user.id, user.email)
    return user
