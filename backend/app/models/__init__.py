# app/models/__init__.py
"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: User account and authentication model
- Snippet: Code snippet with version history
- SnippetTag: Tag row belonging to a Snippet
- SnippetLike: likedBy membership row (Snippet x User)
- Comment: Comment on a Snippet
"""
from .user import User
from .snippet import Snippet, SnippetTag, SnippetLike
from .comment import Comment
