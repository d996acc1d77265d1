# app/services/listing.py
"""
Public feed: paginated, sorted and filtered listing of public snippets.
Private and unlisted snippets never appear here, whoever is asking.
"""
import math
from typing import List, Optional, Tuple

from tortoise.expressions import Q, Subquery

from app.config import settings
from app.core.errors import ValidationError
from app.models.snippet import Snippet, SnippetTag
from app.services.snippets import SNIPPET_RELATIONS

SORT_ORDERS = {
    "latest": ("-created_at",),
    "popular": ("-likes", "-created_at"),
    "commented": ("-comment_count", "-created_at"),
}


def _pagination(total: int, page: int, limit: int) -> dict:
    return {"total": total, "page": page, "limit": limit, "pages": math.ceil(total / limit)}


def _tagged(**tag_filter) -> Subquery:
    # Resolved by the database as a nested SELECT, so a snippet with several
    # matching tags is still a single row in the count and the page.
    return Subquery(SnippetTag.filter(**tag_filter).values("snippet_id"))


async def list_public_snippets(
    sort: str = "latest",
    page: int = 1,
    limit: Optional[int] = None,
    query: Optional[str] = None,
    language: Optional[str] = None,
    tag: Optional[str] = None,
) -> Tuple[List[Snippet], dict]:
    """
    Get one page of public snippets.

    Args:
        sort: "latest" (default), "popular" or "commented"
        page: 1-based page number
        limit: Page size (defaults to settings.default_page_size)
        query: Case-insensitive text matched against title, description and tags
        language: Case-insensitive exact language
        tag: Exact tag

    Returns:
        (snippets, pagination) where pagination is {total, page, limit, pages}

    Raises:
        ValidationError: Unknown sort key or out-of-range page/limit
    """
    if sort not in SORT_ORDERS:
        raise ValidationError(f"Unknown sort key: {sort}")
    if limit is None:
        limit = settings.default_page_size
    if page < 1:
        raise ValidationError("page must be 1 or greater")
    if limit < 1 or limit > settings.max_page_size:
        raise ValidationError(f"limit must be between 1 and {settings.max_page_size}")

    qs = Snippet.filter(visibility="public")

    if language and language.strip():
        qs = qs.filter(language__iexact=language.strip())

    if tag and tag.strip():
        qs = qs.filter(id__in=_tagged(name=tag.strip()))

    if query and query.strip():
        text = query.strip()
        qs = qs.filter(
            Q(title__icontains=text)
            | Q(description__icontains=text)
            | Q(id__in=_tagged(name__icontains=text))
        )

    total = await qs.count()
    rows = await (
        qs.order_by(*SORT_ORDERS[sort])
        .offset((page - 1) * limit)
        .limit(limit)
        .prefetch_related(*SNIPPET_RELATIONS)
    )
    return rows, _pagination(total, page, limit)
