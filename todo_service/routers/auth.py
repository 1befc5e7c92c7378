from typing import Optional
from fastapi import APIRouter, Depends, Request, Response

from ..core.auth import get_optional_current_user, CurrentUser

router = APIRouter()


@router.get("/session")
async def get_session(current_user: Optional[CurrentUser] = Depends(get_optional_current_user)):
    """Current session user, or null when signed out"""
    if current_user is None:
        return {"user": None}
    return {"user": {"id": current_user.user_id, "email": current_user.email}}


@router.post("/logout")
async def logout(request: Request, response: Response):
    """Clear the session cookie"""
    response.delete_cookie(request.app.state.settings.session_cookie_name)
    return {"success": True}


async def login_page(request: Request, callbackUrl: str = "/"):
    """Login surface the request gate redirects anonymous users to"""
    return {
        "message": "Authentication required",
        "callbackUrl": callbackUrl,
        "session": f"{request.app.state.settings.api_prefix}/auth/session",
    }
