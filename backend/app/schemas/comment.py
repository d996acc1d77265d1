# app/schemas/comment.py
"""
Pydantic schemas for comment endpoints.
"""
from pydantic import BaseModel, Field, field_validator

from .common import AuthorOut

class CommentCreateIn(BaseModel):
    """
    Request model for adding a comment to a snippet.
    Content must contain something other than whitespace.
    """
    content: str = Field(max_length=1000)

    @field_validator("content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Comment content is required")
        return value

class CommentOut(BaseModel):
    id: str
    content: str
    author: AuthorOut
    snippet: str
    createdAt: str
    updatedAt: str
