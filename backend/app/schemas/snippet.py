# app/schemas/snippet.py
"""
Pydantic schemas for snippet endpoints.
Defines request models for create/update and the shapes returned by the API.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

from .comment import CommentOut
from .common import AuthorOut

Visibility = Literal["public", "private", "unlisted"]
SortKey = Literal["latest", "popular", "commented"]


def _normalize_tags(tags: Optional[List[str]]) -> List[str]:
    """Strip tags, drop empty ones and de-duplicate while keeping order."""
    seen: list[str] = []
    for tag in tags or []:
        t = (tag or "").strip()
        if t and t not in seen:
            seen.append(t)
    return seen


class _SnippetFields(BaseModel):
    @field_validator("title", "code", "language", check_fields=False)
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if value is None or not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("tags", check_fields=False)
    @classmethod
    def _clean_tags(cls, value):
        return _normalize_tags(value)


class SnippetCreateIn(_SnippetFields):
    """
    Request model for creating a snippet.
    title, code and language are required; everything else has a default.
    """
    title: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    code: str
    language: str = Field(max_length=64)
    visibility: Visibility = "public"
    tags: List[str] = []


class SnippetUpdateIn(_SnippetFields):
    """
    Request model for updating a snippet.
    The full mutable field set must be submitted; description may be null.
    """
    title: str = Field(max_length=100)
    description: Optional[str] = Field(max_length=500)
    code: str
    language: str = Field(max_length=64)
    visibility: Visibility
    tags: List[str]


class VersionSnapshot(BaseModel):
    """A code revision retained when an update changed the code body."""
    code: str
    updatedAt: str
    version: int


class SnippetOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    code: str
    language: str
    visibility: Visibility
    author: AuthorOut
    tags: List[str] = []
    views: int
    likes: int
    likedBy: List[str] = []
    commentCount: int
    version: int
    previousVersions: List[VersionSnapshot] = []
    createdAt: str
    updatedAt: str


class PaginationOut(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class SnippetListOut(BaseModel):
    snippets: List[SnippetOut]
    pagination: PaginationOut


class LikeToggleOut(BaseModel):
    liked: bool
    likeCount: int


class SnippetDetailOut(BaseModel):
    snippet: SnippetOut
    comments: List[CommentOut]  # Newest first


class UserSnippetsOut(BaseModel):
    snippets: List[SnippetOut]


class SnippetVersionsOut(BaseModel):
    """Current code and version plus the retained code history, oldest first."""
    id: str
    version: int
    code: str
    updatedAt: str
    previousVersions: List[VersionSnapshot] = []


class SnippetDeleteOut(BaseModel):
    id: str
    deleted: bool
    commentsDeleted: int  # Comments removed together with the snippet
