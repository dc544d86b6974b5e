"""
Session store and auth gate.

The session lives in Starlette's signed cookie (SessionMiddleware, keyed by
SESSION_SECRET). This module is the only code that touches request.session;
everything downstream receives an explicit SessionContext.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from pydantic import ValidationError as PydanticValidationError

from pdfhub.config import SESSION_TTL_SECONDS
from pdfhub.errors import Unauthenticated
from pdfhub.github import UserProfile
from pdfhub.schemas import SessionData

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionContext:
    """What a protected operation gets to see of the session."""
    token: str
    user: UserProfile


def start_session(request: Request, token: str, user: UserProfile) -> None:
    data = SessionData(access_token=token, user=user, issued_at=time.time())
    request.session.clear()
    # Profile fields GitHub did not send stay out of the cookie
    request.session.update(data.model_dump(mode="json", exclude_unset=True))


def load_session(request: Request) -> Optional[SessionData]:
    """
    Return the current session, or None when absent, malformed or expired.

    Expiry is checked here against issued_at, on top of the cookie max_age,
    so a replayed cookie stops working after the TTL as well.
    """
    raw = dict(request.session)
    if not raw.get("access_token"):
        return None

    try:
        data = SessionData.model_validate(raw)
    except PydanticValidationError:
        logger.warning("Discarding malformed session")
        request.session.clear()
        return None

    if time.time() - data.issued_at > SESSION_TTL_SECONDS:
        logger.info("Session for %s expired", data.user.login)
        request.session.clear()
        return None

    return data


def end_session(request: Request) -> None:
    request.session.clear()


def require_session(request: Request) -> SessionContext:
    """FastAPI dependency guarding every storage-facing route."""
    data = load_session(request)
    if data is None:
        raise Unauthenticated("Not logged in")
    return SessionContext(token=data.access_token, user=data.user)
