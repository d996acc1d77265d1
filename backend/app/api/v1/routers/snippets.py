from fastapi import APIRouter, Depends, Query, status
from app.api.v1.deps import get_current_user, get_optional_user
from app.config import settings
from app.core.errors import run_bounded
from app.models.user import User
from app.schemas.comment import CommentCreateIn, CommentOut
from app.schemas.common import Envelope
from app.schemas.snippet import (
    LikeToggleOut,
    SnippetCreateIn,
    SnippetDeleteOut,
    SnippetDetailOut,
    SnippetListOut,
    SnippetOut,
    SnippetUpdateIn,
    SnippetVersionsOut,
    SortKey,
)
from app.services import engagement, listing
from app.services import snippets as snippet_service
from app.services.serializers import comment_to_dict, snippet_to_dict

router = APIRouter(prefix="/snippets", tags=["snippets"])

@router.get("", response_model=Envelope[SnippetListOut])
async def list_snippets(
    sort: SortKey = Query("latest"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    query: str | None = Query(default=None, description="Search title, description and tags"),
    language: str | None = Query(default=None),
    tag: str | None = Query(default=None),
):
    """
    Get one page of the public feed.

    Only public snippets are listed; private and unlisted ones never appear,
    regardless of who is asking.

    Args:
        sort: "latest" (newest first), "popular" (most likes) or "commented" (most comments)
        page: 1-based page number
        limit: Page size
        query: Optional free-text filter
        language: Optional language filter
        tag: Optional tag filter

    Returns:
        dict: Response containing:
            - success: bool (always True)
            - data: dict with:
                - snippets: List of snippet objects
                - pagination: {total, page, limit, pages}

    Raises:
        400: Invalid sort key or pagination values
    """
    rows, pagination = await run_bounded(listing.list_public_snippets(
        sort=sort, page=page, limit=limit, query=query, language=language, tag=tag,
    ))
    return {"success": True, "data": {"snippets": [snippet_to_dict(s) for s in rows], "pagination": pagination}}

@router.post("", response_model=Envelope[SnippetOut], status_code=status.HTTP_201_CREATED)
async def create_snippet(body: SnippetCreateIn, user: User = Depends(get_current_user)):
    """
    Create a new snippet owned by the authenticated user.

    The snippet starts at version 1 with no history, views or likes.

    Raises:
        401: Not authenticated
        400: title, code or language missing
    """
    snippet = await run_bounded(snippet_service.create_snippet(user, body))
    return {"success": True, "data": snippet_to_dict(snippet)}

@router.get("/{snippet_id}", response_model=Envelope[SnippetDetailOut])
async def get_snippet(snippet_id: str, viewer: User | None = Depends(get_optional_user)):
    """
    Get a snippet and its comments (newest first).

    Private snippets are returned to their author only. Every read by someone
    other than the author adds one view.

    Raises:
        400: Malformed id
        401: Private snippet, anonymous caller
        403: Private snippet, caller is not the author
        404: Snippet not found
    """
    snippet, comments = await run_bounded(snippet_service.get_snippet(snippet_id, viewer))
    return {
        "success": True,
        "data": {
            "snippet": snippet_to_dict(snippet),
            "comments": [comment_to_dict(c) for c in comments],
        },
    }

@router.put("/{snippet_id}", response_model=Envelope[SnippetOut])
async def update_snippet(snippet_id: str, body: SnippetUpdateIn, user: User = Depends(get_current_user)):
    """
    Replace the mutable fields of a snippet (author only).

    A change to the code body stores the previous code as a version snapshot
    and bumps the version number; other edits do not.

    Raises:
        400: Malformed id or incomplete body
        401: Not authenticated
        403: Caller is not the author
        404: Snippet not found
    """
    snippet = await run_bounded(snippet_service.update_snippet(user, snippet_id, body))
    return {"success": True, "data": snippet_to_dict(snippet)}

@router.delete("/{snippet_id}", response_model=Envelope[SnippetDeleteOut])
async def delete_snippet(snippet_id: str, user: User = Depends(get_current_user)):
    """
    Delete a snippet and all of its comments (author only).

    Raises:
        400: Malformed id
        401: Not authenticated
        403: Caller is not the author
        404: Snippet not found
    """
    removed = await run_bounded(snippet_service.delete_snippet(user, snippet_id))
    return {"success": True, "data": {"id": snippet_id, "deleted": True, "commentsDeleted": removed}}

@router.get("/{snippet_id}/versions", response_model=Envelope[SnippetVersionsOut])
async def get_snippet_versions(snippet_id: str, viewer: User | None = Depends(get_optional_user)):
    """Current code and version number plus earlier code revisions. Does not count a view."""
    data = await run_bounded(snippet_service.get_versions(snippet_id, viewer))
    return {"success": True, "data": data}

@router.post("/{snippet_id}/like", response_model=Envelope[LikeToggleOut])
async def toggle_like(snippet_id: str, user: User = Depends(get_current_user)):
    """
    Like a snippet, or unlike it if the caller already does.

    Returns:
        dict: data = {liked: bool, likeCount: int}. likeCount is computed from
        the count seen before the toggle and may lag concurrent likes.

    Raises:
        400: Malformed id
        401: Not authenticated
        403: Private snippet of another user
        404: Snippet not found
    """
    data = await run_bounded(engagement.toggle_like(user, snippet_id))
    return {"success": True, "data": data}

@router.post("/{snippet_id}/comments", response_model=Envelope[CommentOut], status_code=status.HTTP_201_CREATED)
async def add_comment(snippet_id: str, body: CommentCreateIn, user: User = Depends(get_current_user)):
    """
    Add a comment to a snippet the caller can read.

    Raises:
        400: Malformed id or empty content
        401: Not authenticated
        403: Private snippet of another user
        404: Snippet not found
    """
    comment = await run_bounded(engagement.add_comment(user, snippet_id, body.content))
    return {"success": True, "data": comment_to_dict(comment)}
