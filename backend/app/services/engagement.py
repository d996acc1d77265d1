# app/services/engagement.py
"""
Likes and comments on snippets.

likedBy membership is a SnippetLike row guarded by a unique (snippet, user)
pair. The likes counter only moves when a row was actually inserted or
deleted, so it stays a mirror of the membership set.
"""
import logging
from typing import Optional

from tortoise.exceptions import IntegrityError
from tortoise.expressions import F
from tortoise.transactions import in_transaction

from app.core.errors import Unauthorized, ValidationError
from app.models.comment import Comment
from app.models.snippet import Snippet, SnippetLike
from app.models.user import User
from app.services.snippets import ensure_readable, load_snippet

logger = logging.getLogger("uvicorn.error")

MAX_COMMENT_LENGTH = 1000


async def add_like(snippet: Snippet, user: User) -> bool:
    """
    Add the user to the snippet's likedBy set.

    The membership row and the counter bump commit together, so a failed
    counter update leaves no orphan like behind.

    Returns:
        True if the user was added, False if already a member (no counter change)
    """
    try:
        async with in_transaction():
            await SnippetLike.create(snippet_id=snippet.id, user_id=user.id)
            await Snippet.filter(id=snippet.id).update(likes=F("likes") + 1)
    except IntegrityError:
        return False
    return True


async def remove_like(snippet: Snippet, user: User) -> bool:
    """
    Remove the user from the snippet's likedBy set.

    Returns:
        True if the user was removed, False if not a member (no counter change)
    """
    async with in_transaction():
        removed = await SnippetLike.filter(snippet_id=snippet.id, user_id=user.id).delete()
        if removed:
            await Snippet.filter(id=snippet.id).update(likes=F("likes") - 1)
    return bool(removed)


async def toggle_like(user: Optional[User], snippet_id: str) -> dict:
    """
    Like the snippet, or unlike it when the caller already likes it.

    The returned likeCount is the counter read before the toggle, plus or
    minus one. It is an echo for the client, not a fresh read.

    Raises:
        Unauthorized, InvalidId, NotFound, Forbidden
    """
    if user is None:
        raise Unauthorized()
    snippet = await load_snippet(snippet_id)
    ensure_readable(snippet, user)

    already_liked = await SnippetLike.filter(snippet_id=snippet.id, user_id=user.id).exists()
    if already_liked:
        await remove_like(snippet, user)
        return {"liked": False, "likeCount": snippet.likes - 1}

    await add_like(snippet, user)
    return {"liked": True, "likeCount": snippet.likes + 1}


async def add_comment(user: Optional[User], snippet_id: str, content: Optional[str]) -> Comment:
    """
    Add a comment to a snippet the caller can read.

    The snippet's comment_count is bumped in the same transaction as the
    insert so the "commented" sort stays consistent with the comments table.

    Raises:
        Unauthorized: No caller identity
        ValidationError: Empty, whitespace-only or over-long content
        InvalidId, NotFound, Forbidden
    """
    if user is None:
        raise Unauthorized()
    if not content or not content.strip():
        raise ValidationError("Comment content is required")
    if len(content) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment cannot be more than {MAX_COMMENT_LENGTH} characters")

    snippet = await load_snippet(snippet_id)
    ensure_readable(snippet, user)

    async with in_transaction():
        comment = await Comment.create(content=content, author=user, snippet=snippet)
        await Snippet.filter(id=snippet.id).update(comment_count=F("comment_count") + 1)

    logger.info("[snippets] comment=%s added to snippet=%s by user=%s", comment.id, snippet.id, user.id)
    return comment
