"""
Ensures every signed-in user owns exactly one `pdf-storage` repository.

Runs at login. Existence is checked every time (never cached), and a
create that loses a race against a concurrent first login counts as the
repo already existing.
"""

import logging

from pdfhub.github import GitHubClient, GitHubConflict, GitHubNotFound
from pdfhub.schemas import ProvisionResult

logger = logging.getLogger(__name__)

STORAGE_REPO = "pdf-storage"
STORAGE_REPO_DESCRIPTION = "My personal PDF storage"
STORAGE_BRANCH = "main"


async def ensure_storage_repo(client: GitHubClient, owner: str) -> ProvisionResult:
    """
    Look up <owner>/pdf-storage and create it (public) when GitHub says 404.

    `owner` is the login of the token holder; repos are created under
    /user/repos, so the two must match. Lookup failures other than 404
    propagate unchanged.
    """
    try:
        await client.get_repo(owner, STORAGE_REPO)
        logger.info("Storage repo %s/%s already exists", owner, STORAGE_REPO)
        return ProvisionResult(status="existing", owner_login=owner)
    except GitHubNotFound:
        pass

    try:
        await client.create_repo(STORAGE_REPO, STORAGE_REPO_DESCRIPTION, private=False)
    except GitHubConflict:
        logger.info("Storage repo %s/%s was created concurrently", owner, STORAGE_REPO)
        return ProvisionResult(status="existing", owner_login=owner)

    logger.info("Created storage repo %s/%s", owner, STORAGE_REPO)
    return ProvisionResult(status="created", owner_login=owner)
