"""
Authorization-code → session.

    code → access token → profile → ensure pdf-storage → (token, profile)

Nothing is written to the session here; the caller stores the returned
values only after every remote step has succeeded.
"""

import logging
from typing import Optional

import httpx

from pdfhub import github
from pdfhub.config import Settings
from pdfhub.errors import AuthExchangeError, UpstreamFailure
from pdfhub.github import GitHubAPIError, GitHubClient, UserProfile
from pdfhub.services.provisioner import ensure_storage_repo

logger = logging.getLogger(__name__)


async def complete_login(
    settings: Settings,
    code: Optional[str],
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> tuple[str, UserProfile]:
    """
    Run the whole callback flow and return (access_token, profile).

    Raises AuthExchangeError when GitHub hands back no token and
    UpstreamFailure for any later failure.
    """
    try:
        token = await github.exchange_code(
            settings.GITHUB_CLIENT_ID,
            settings.GITHUB_CLIENT_SECRET,
            code,
            oauth_url=settings.GITHUB_OAUTH_URL,
            transport=transport,
        )
    except (GitHubAPIError, httpx.HTTPError, ValueError) as exc:
        logger.exception("OAuth token exchange failed")
        raise UpstreamFailure("OAuth failed") from exc

    if not token:
        raise AuthExchangeError("No access token")

    try:
        async with GitHubClient(token, api_url=settings.GITHUB_API_URL, transport=transport) as client:
            user = await client.get_user()
            provisioned = await ensure_storage_repo(client, user.login)
    except GitHubAPIError as exc:
        logger.exception("Login failed after token exchange: %r", exc.payload)
        raise UpstreamFailure("OAuth failed") from exc

    logger.info("User %s logged in (storage repo %s)", user.login, provisioned.status)
    return token, user
