# app/services/snippets.py
"""
Snippet lifecycle: create, read (with visibility check and view counting),
update (with code version snapshots) and delete (cascading to comments).

Counters are only ever changed with F() expressions inside a single UPDATE so
that concurrent requests cannot lose increments.
"""
import logging
import uuid
from typing import List, Optional, Tuple

from tortoise import timezone
from tortoise.expressions import F
from tortoise.transactions import in_transaction

from app.core.errors import Forbidden, InvalidId, NotFound, Unauthorized, ValidationError
from app.models.comment import Comment
from app.models.snippet import Snippet, SnippetLike, SnippetTag
from app.models.user import User
from app.schemas.snippet import SnippetCreateIn, SnippetUpdateIn
from app.services.serializers import iso_utc

logger = logging.getLogger("uvicorn.error")

SNIPPET_RELATIONS = ("author", "tag_links", "like_links")
_MUTABLE_FIELDS = ["title", "description", "code", "language", "visibility"]


def parse_snippet_id(raw: str) -> uuid.UUID:
    """
    Parse a snippet identifier from a path parameter.

    Raises:
        InvalidId: If the value is not a well-formed identifier
    """
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        raise InvalidId()


async def load_snippet(snippet_id: str) -> Snippet:
    """
    Fetch a snippet row by id.

    Raises:
        InvalidId: Malformed id
        NotFound: No snippet with that id
    """
    sid = parse_snippet_id(snippet_id)
    snippet = await Snippet.get_or_none(id=sid)
    if snippet is None:
        raise NotFound()
    return snippet


def is_author(snippet: Snippet, user: Optional[User]) -> bool:
    return user is not None and str(snippet.author_id) == str(user.id)


def ensure_readable(snippet: Snippet, viewer: Optional[User]) -> None:
    """
    Private snippets are readable by their author only.
    Public and unlisted snippets are readable by anyone holding the id.

    Raises:
        Unauthorized: Private snippet and no identity
        Forbidden: Private snippet and the caller is not the author
    """
    if snippet.visibility != "private" or is_author(snippet, viewer):
        return
    if viewer is None:
        raise Unauthorized("Sign in to view this snippet")
    raise Forbidden()


async def load_owned_snippet(user: Optional[User], snippet_id: str, action: str) -> Snippet:
    if user is None:
        raise Unauthorized()
    snippet = await load_snippet(snippet_id)
    if not is_author(snippet, user):
        logger.warning("[snippets] user=%s tried to %s snippet=%s owned by %s",
                       user.id, action, snippet.id, snippet.author_id)
        raise Forbidden(f"Unauthorized to {action} this snippet")
    return snippet


async def _replace_tags(snippet: Snippet, tags: List[str]) -> None:
    await SnippetTag.filter(snippet_id=snippet.id).delete()
    if tags:
        await SnippetTag.bulk_create([SnippetTag(snippet=snippet, name=t) for t in tags])


async def create_snippet(user: Optional[User], data: SnippetCreateIn) -> Snippet:
    """
    Create a snippet owned by the caller.

    The new snippet starts at version 1 with no history, no views and no likes.

    Raises:
        Unauthorized: No caller identity
        ValidationError: title, code or language missing
    """
    if user is None:
        raise Unauthorized()
    for field in ("title", "code", "language"):
        if not (getattr(data, field) or "").strip():
            raise ValidationError(f"{field} is required")

    async with in_transaction():
        snippet = await Snippet.create(
            title=data.title,
            description=data.description,
            code=data.code,
            language=data.language,
            visibility=data.visibility,
            author=user,
            version=1,
            views=0,
            likes=0,
            previous_versions=[],
        )
        await _replace_tags(snippet, data.tags)

    await snippet.fetch_related(*SNIPPET_RELATIONS)
    logger.info("[snippets] created snippet=%s by user=%s", snippet.id, user.id)
    return snippet


async def get_snippet(snippet_id: str, viewer: Optional[User]) -> Tuple[Snippet, List[Comment]]:
    """
    Read a snippet together with its comments (newest first).

    A read by anyone other than the author counts as one view. The increment
    is a single atomic UPDATE; concurrent reads each count.

    Raises:
        InvalidId, NotFound, Unauthorized, Forbidden
    """
    snippet = await load_snippet(snippet_id)
    ensure_readable(snippet, viewer)

    if not is_author(snippet, viewer):
        await Snippet.filter(id=snippet.id).update(views=F("views") + 1)
        snippet.views += 1

    await snippet.fetch_related(*SNIPPET_RELATIONS)
    comments = await (
        Comment.filter(snippet_id=snippet.id)
        .select_related("author")
        .order_by("-created_at")
    )
    return snippet, comments


async def get_versions(snippet_id: str, viewer: Optional[User]) -> dict:
    """Current version number plus retained code history; does not count a view."""
    snippet = await load_snippet(snippet_id)
    ensure_readable(snippet, viewer)
    return {
        "id": str(snippet.id),
        "version": snippet.version,
        "code": snippet.code,
        "updatedAt": iso_utc(snippet.updated_at),
        "previousVersions": list(snippet.previous_versions or []),
    }


async def update_snippet(user: Optional[User], snippet_id: str, data: SnippetUpdateIn) -> Snippet:
    """
    Overwrite a snippet's mutable fields.

    Only the code body is versioned: when the submitted code differs from the
    stored code, the pre-update {code, updatedAt, version} is appended to
    previous_versions and version advances by one. Title, description,
    language, visibility and tag edits are not kept in history.

    Raises:
        Unauthorized, InvalidId, NotFound, Forbidden
    """
    snippet = await load_owned_snippet(user, snippet_id, "edit")

    update_fields = list(_MUTABLE_FIELDS) + ["updated_at"]
    if data.code != snippet.code:
        history = list(snippet.previous_versions or [])
        history.append({
            "code": snippet.code,
            "updatedAt": iso_utc(snippet.updated_at),
            "version": snippet.version,
        })
        snippet.previous_versions = history
        snippet.version += 1
        update_fields += ["previous_versions", "version"]
        logger.info("[snippets] snippet=%s code changed -> version %d", snippet.id, snippet.version)

    snippet.title = data.title
    snippet.description = data.description
    snippet.code = data.code
    snippet.language = data.language
    snippet.visibility = data.visibility
    snippet.updated_at = timezone.now()

    async with in_transaction():
        # Counters are left out of update_fields so concurrent likes/views survive
        await snippet.save(update_fields=update_fields)
        await _replace_tags(snippet, data.tags)

    await snippet.refresh_from_db(fields=["views", "likes", "comment_count"])
    await snippet.fetch_related(*SNIPPET_RELATIONS)
    return snippet


async def delete_snippet(user: Optional[User], snippet_id: str) -> int:
    """
    Delete a snippet and everything hanging off it.

    Comments, like rows and tag rows go in the same transaction as the
    snippet, so a failure part-way leaves nothing orphaned.

    Returns:
        Number of comments removed with the snippet

    Raises:
        Unauthorized, InvalidId, NotFound, Forbidden
    """
    snippet = await load_owned_snippet(user, snippet_id, "delete")
    async with in_transaction():
        removed_comments = await Comment.filter(snippet_id=snippet.id).delete()
        await SnippetLike.filter(snippet_id=snippet.id).delete()
        await SnippetTag.filter(snippet_id=snippet.id).delete()
        await snippet.delete()
    logger.info("[snippets] deleted snippet=%s (%s comments)", snippet.id, removed_comments)
    return removed_comments


async def list_user_snippets(user: Optional[User]) -> List[Snippet]:
    """All of the caller's snippets, every visibility, newest first."""
    if user is None:
        raise Unauthorized()
    return await (
        Snippet.filter(author_id=user.id)
        .order_by("-created_at")
        .prefetch_related(*SNIPPET_RELATIONS)
    )
