"""
Shared FastAPI dependencies.
"""

from typing import AsyncIterator

from fastapi import Depends, Request

from pdfhub.config import Settings
from pdfhub.github import GitHubClient
from pdfhub.services.storage import ObjectStore
from pdfhub.session import SessionContext, require_session


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_object_store(
    request: Request,
    ctx: SessionContext = Depends(require_session),
) -> AsyncIterator[ObjectStore]:
    """ObjectStore for the signed-in user; its HTTP client is closed after the response."""
    settings = get_settings(request)
    async with GitHubClient(
        ctx.token,
        api_url=settings.GITHUB_API_URL,
        transport=request.app.state.github_transport,
    ) as client:
        yield ObjectStore(client, ctx.user.login, raw_base_url=settings.GITHUB_RAW_URL)
