# app/services/serializers.py
"""
Convert ORM rows into the camelCase dictionaries returned by the API.
Relations used here (author, tag_links, like_links) must be fetched first.
"""
import datetime as dt

from app.models.comment import Comment
from app.models.snippet import Snippet
from app.models.user import User


def iso_utc(value: dt.datetime | None) -> str | None:
    """ISO-8601 string for a UTC timestamp; naive values are tagged with Z."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.isoformat() + "Z"
    return value.isoformat()


def author_to_dict(u: User) -> dict:
    return {"id": str(u.id), "name": u.name, "image": u.image}


def user_to_dict(u: User) -> dict:
    return {
        "id": str(u.id),
        "name": u.name,
        "email": u.email,
        "image": u.image,
        "provider": u.provider,
    }


def snippet_to_dict(s: Snippet) -> dict:
    tags = [t.name for t in sorted(s.tag_links, key=lambda t: t.id)]
    return {
        "id": str(s.id),
        "title": s.title,
        "description": s.description,
        "code": s.code,
        "language": s.language,
        "visibility": s.visibility,
        "author": author_to_dict(s.author),
        "tags": tags,
        "views": s.views,
        "likes": s.likes,
        "likedBy": [str(like.user_id) for like in s.like_links],
        "commentCount": s.comment_count,
        "version": s.version,
        "previousVersions": list(s.previous_versions or []),
        "createdAt": iso_utc(s.created_at),
        "updatedAt": iso_utc(s.updated_at),
    }


def comment_to_dict(c: Comment) -> dict:
    return {
        "id": str(c.id),
        "content": c.content,
        "author": author_to_dict(c.author),
        "snippet": str(c.snippet_id),
        "createdAt": iso_utc(c.created_at),
        "updatedAt": iso_utc(c.updated_at),
    }
