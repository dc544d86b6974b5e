"""
Login, identity and logout endpoints.

GET  /auth/github           redirect to GitHub's consent page
GET  /auth/github/callback  code exchange, repo provisioning, session start
GET  /me                    cached profile from the session
POST /logout                clear the session
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse

from pdfhub import github
from pdfhub.config import Settings
from pdfhub.deps import get_settings
from pdfhub.github import UserProfile
from pdfhub.schemas import MessageResponse
from pdfhub.services.oauth import complete_login
from pdfhub.session import SessionContext, end_session, require_session, start_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/auth/github")
def github_login(settings: Settings = Depends(get_settings)) -> RedirectResponse:
    """Send the browser to GitHub's consent page."""
    url = github.authorize_url(
        settings.GITHUB_CLIENT_ID,
        settings.oauth_redirect_uri,
        oauth_url=settings.GITHUB_OAUTH_URL,
    )
    return RedirectResponse(url, status_code=302)


@router.get("/auth/github/callback")
async def github_callback(
    request: Request,
    code: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """
    GitHub redirects back here with ?code=...

    The session is only written once the token, profile and storage repo
    are all in place.
    """
    token, user = await complete_login(settings, code, transport=request.app.state.github_transport)
    start_session(request, token, user)
    return RedirectResponse(settings.FRONTEND_URL, status_code=302)


@router.get("/me", response_model=UserProfile, response_model_exclude_unset=True)
def me(ctx: SessionContext = Depends(require_session)) -> UserProfile:
    """Cached profile from login time, only the fields GitHub sent. No GitHub call."""
    return ctx.user


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request):
    try:
        logger.info("Logging out")
        end_session(request)
        return MessageResponse(message="logged out successfully")
    except Exception:
        logger.exception("Logout failed")
        return JSONResponse(
            status_code=401,
            content={"message": "Unable to logout currently, please try after some time."},
        )
