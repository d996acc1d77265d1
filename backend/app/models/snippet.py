# app/models/snippet.py
"""
Database models for snippets.
A snippet is a unit of code plus metadata, owned by the user who created it.
Its tags and the set of users who liked it live in their own tables so that
tag filtering and like membership are plain indexed lookups.
"""
import uuid
from tortoise import fields, models

VISIBILITIES = ("public", "private", "unlisted")

class Snippet(models.Model):
    """
    Snippet database model.

    Versioning:
    - version starts at 1 and advances only when an update changes `code`
    - previous_versions holds one {code, updatedAt, version} snapshot per
      code revision, oldest first

    Relationships:
    - Belongs to a User (author, many-to-one, immutable after creation)
    - Has many SnippetTags, SnippetLikes and Comments (cascade on delete)
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: unique snippet identifier
    title = fields.CharField(max_length=100)
    description = fields.CharField(max_length=500, null=True)
    code = fields.TextField()
    language = fields.CharField(max_length=64, index=True)
    visibility = fields.CharField(max_length=16, default="public", index=True)  # public | private | unlisted
    author = fields.ForeignKeyField(
        "models.User",
        related_name="snippets",
        on_delete=fields.CASCADE
    )

    views = fields.IntField(default=0)
    likes = fields.IntField(default=0)  # Mirror of the SnippetLike row count
    comment_count = fields.IntField(default=0)  # Materialized for the "commented" sort

    version = fields.IntField(default=1)
    previous_versions = fields.JSONField(default=list)  # [{"code", "updatedAt", "version"}, ...]

    created_at = fields.DatetimeField(auto_now_add=True, index=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "snippets"


class SnippetTag(models.Model):
    """One tag on a snippet; rows keep the order in which tags were given."""
    id = fields.IntField(pk=True)
    snippet = fields.ForeignKeyField("models.Snippet", related_name="tag_links", on_delete=fields.CASCADE)
    name = fields.CharField(max_length=64, index=True)

    class Meta:
        table = "snippet_tags"


class SnippetLike(models.Model):
    """
    Membership of a user in a snippet's likedBy set.
    The unique pair makes a second insert for the same user fail at the store.
    """
    id = fields.IntField(pk=True)
    snippet = fields.ForeignKeyField("models.Snippet", related_name="like_links", on_delete=fields.CASCADE)
    user = fields.ForeignKeyField("models.User", related_name="liked_snippets", on_delete=fields.CASCADE)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "snippet_likes"
        unique_together = (("snippet", "user"),)
