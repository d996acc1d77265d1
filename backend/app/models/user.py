# app/models/user.py
"""
Database model for users.
Represents an account that can author snippets, comments and likes.
"""
import uuid
from tortoise import fields, models

class User(models.Model):
    """
    User database model.

    Created at registration (provider "credentials") or on the first GitHub
    sign-in (provider "github", no password hash). Never deleted by the API.

    Relationships:
    - Has many Snippets (one-to-many, via related_name="snippets")
    - Has many Comments (one-to-many, via related_name="comments")
    - Has many SnippetLikes (one-to-many, via related_name="liked_snippets")

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Email must be unique across all users
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: unique user identifier
    name = fields.CharField(max_length=256)  # Display name
    email = fields.CharField(
        max_length=256,
        unique=True,
        index=True
    )  # Login email (must be unique, indexed for fast lookups)
    password_hash = fields.CharField(max_length=255, null=True)  # Argon2 hash; null for GitHub accounts
    image = fields.CharField(max_length=1024, null=True)  # Avatar URL (optional)
    provider = fields.CharField(max_length=16, default="credentials")  # "credentials" or "github"
    created_at = fields.DatetimeField(auto_now_add=True)  # Timestamp when account was created (auto-set on creation)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name
