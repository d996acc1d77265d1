from fastapi import APIRouter, Depends
from app.api.v1.deps import get_current_user
from app.core.errors import run_bounded
from app.models.user import User
from app.schemas.common import Envelope
from app.schemas.snippet import UserSnippetsOut
from app.services import snippets as snippet_service
from app.services.serializers import snippet_to_dict

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/me/snippets", response_model=Envelope[UserSnippetsOut])
async def my_snippets(user: User = Depends(get_current_user)):
    """
    Get every snippet the authenticated user has written, newest first.

    Unlike the public feed this includes private and unlisted snippets.

    Raises:
        401: Not authenticated
    """
    rows = await run_bounded(snippet_service.list_user_snippets(user))
    return {"success": True, "data": {"snippets": [snippet_to_dict(s) for s in rows]}}
