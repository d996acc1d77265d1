# app/schemas/common.py
"""
Shared response shapes: the success envelope and the author reference.
"""
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")

class Envelope(BaseModel, Generic[T]):
    """
    Success wrapper returned by every JSON route: {"success": true, "data": ...}.
    Errors use the AppError body instead.
    """
    success: bool = True
    data: T

class AuthorOut(BaseModel):
    """Expanded author/commenter reference."""
    id: str
    name: str
    image: Optional[str] = None
