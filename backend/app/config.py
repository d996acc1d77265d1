# app/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file

class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Snippet Share API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Upper bound for a single request's trip through the service layer (seconds)
    request_timeout_sec: float = float(os.getenv("REQUEST_TIMEOUT_SEC", "10"))

    # Public feed pagination
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "12"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # GitHub OAuth (third-party sign-in)
    github_client_id: str | None = os.getenv("GITHUB_ID")
    github_client_secret: str | None = os.getenv("GITHUB_SECRET")
    github_oauth_url: str = os.getenv("GITHUB_OAUTH_URL", "https://github.com/login/oauth/access_token")
    github_api_url: str = os.getenv("GITHUB_API_URL", "https://api.github.com")

settings = Settings()  # Instantiate configuration
