"""
GitHub REST API wrapper. The only file that calls GitHub.

Covers identity, repository lifecycle and the Contents API. Every response
is parsed into a typed model; every non-2xx response is raised as a
GitHubAPIError subclass. No retries and no timeouts beyond httpx defaults.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote, urlencode

import httpx
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_OAUTH_URL = "https://github.com/login/oauth"
DEFAULT_RAW_URL = "https://raw.githubusercontent.com"


# ---------------------------------------------------------
# Response models
# ---------------------------------------------------------
class UserProfile(BaseModel):
    """
    GitHub identity, cached in the session at login. Only `login` is relied
    on. Extra fields GitHub sends are kept, and fields it did not send stay
    unset, so `/me` can echo the profile verbatim with exclude_unset.
    """
    model_config = ConfigDict(extra="allow")

    login: str
    id: Optional[int] = None
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None


class GitHubRepo(BaseModel):
    name: str
    full_name: str
    private: bool = False
    default_branch: Optional[str] = None
    html_url: Optional[str] = None


class ContentEntry(BaseModel):
    name: str
    path: str
    sha: str
    type: str
    size: int = 0
    download_url: Optional[str] = None


class ContentCommit(BaseModel):
    content: Optional[ContentEntry] = None
    commit: dict[str, Any]


# ---------------------------------------------------------
# Errors
# ---------------------------------------------------------
class GitHubAPIError(Exception):
    def __init__(self, status_code: int, message: str, payload: Any = None):
        super().__init__(f"GitHub API {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.payload = payload


class GitHubNotFound(GitHubAPIError):
    pass


class GitHubConflict(GitHubAPIError):
    """409, or a 422 saying the name is taken / the SHA does not match."""


_CONFLICT_422_MARKERS = ("already exists", "does not match", "wasn't supplied")


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return

    try:
        payload = response.json()
    except ValueError:
        payload = response.text

    message = payload.get("message", "") if isinstance(payload, dict) else str(payload)
    status = response.status_code

    if status == 404:
        raise GitHubNotFound(status, message, payload)
    if status == 409:
        raise GitHubConflict(status, message, payload)
    if status == 422 and any(m in str(payload) for m in _CONFLICT_422_MARKERS):
        raise GitHubConflict(status, message, payload)
    raise GitHubAPIError(status, message, payload)


def raw_url(owner: str, repo: str, branch: str, path: str, base_url: str = DEFAULT_RAW_URL) -> str:
    """Public raw-content URL of a committed file. No request is made."""
    return f"{base_url}/{owner}/{repo}/{branch}/{quote(path)}"


def authorize_url(client_id: str, redirect_uri: str, scope: str = "public_repo",
                  oauth_url: str = DEFAULT_OAUTH_URL) -> str:
    query = urlencode({"client_id": client_id, "scope": scope, "redirect_uri": redirect_uri})
    return f"{oauth_url}/authorize?{query}"


async def exchange_code(
    client_id: str,
    client_secret: str,
    code: Optional[str],
    oauth_url: str = DEFAULT_OAUTH_URL,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[str]:
    """
    Trade an OAuth authorization code for an access token.

    GitHub answers a bad or missing code with 200 and an ``error`` field,
    so a missing token is returned as None rather than raised.
    """
    async with httpx.AsyncClient(transport=transport) as client:
        response = await client.post(
            f"{oauth_url}/access_token",
            json={"client_id": client_id, "client_secret": client_secret, "code": code},
            headers={"Accept": "application/json"},
        )
    _raise_for_status(response)

    data = response.json()
    if "error" in data:
        logger.warning("OAuth code exchange rejected: %s", data.get("error_description") or data["error"])
    return data.get("access_token")


class GitHubClient:
    """
    Per-request client bound to one user's access token.

    Usage:
        async with GitHubClient(token) as gh:
            user = await gh.get_user()
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=api_url,
            transport=transport,
            headers={
                "Authorization": f"token {token}",
                "Accept": "application/vnd.github.v3+json",
            },
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise GitHubAPIError(0, f"{type(exc).__name__}: {exc}") from exc
        _raise_for_status(response)
        return response.json()

    @staticmethod
    def _contents_url(owner: str, repo: str, path: str) -> str:
        return f"/repos/{owner}/{repo}/contents/{quote(path)}"

    # --- identity -----------------------------------------------------

    async def get_user(self) -> UserProfile:
        return UserProfile.model_validate(await self._request("GET", "/user"))

    # --- repositories -------------------------------------------------

    async def get_repo(self, owner: str, name: str) -> GitHubRepo:
        return GitHubRepo.model_validate(await self._request("GET", f"/repos/{owner}/{name}"))

    async def create_repo(self, name: str, description: str, private: bool = False) -> GitHubRepo:
        data = await self._request(
            "POST",
            "/user/repos",
            json={"name": name, "description": description, "private": private},
        )
        return GitHubRepo.model_validate(data)

    # --- contents -----------------------------------------------------

    async def get_contents(self, owner: str, repo: str, path: str) -> ContentEntry:
        data = await self._request("GET", self._contents_url(owner, repo, path))
        if isinstance(data, list):
            raise GitHubAPIError(200, f"'{path}' is a directory, expected a file", data)
        return ContentEntry.model_validate(data)

    async def list_contents(self, owner: str, repo: str, path: str) -> list[ContentEntry]:
        data = await self._request("GET", self._contents_url(owner, repo, path))
        if not isinstance(data, list):
            raise GitHubAPIError(200, f"'{path}' is a file, expected a directory", data)
        return [ContentEntry.model_validate(item) for item in data]

    async def put_contents(
        self,
        owner: str,
        repo: str,
        path: str,
        content_b64: str,
        message: str,
        sha: Optional[str] = None,
    ) -> ContentCommit:
        body = {"message": message, "content": content_b64}
        if sha:
            body["sha"] = sha
        data = await self._request("PUT", self._contents_url(owner, repo, path), json=body)
        return ContentCommit.model_validate(data)

    async def delete_contents(self, owner: str, repo: str, path: str, sha: str, message: str) -> ContentCommit:
        # httpx.delete() takes no body; go through request()
        data = await self._request(
            "DELETE",
            self._contents_url(owner, repo, path),
            json={"message": message, "sha": sha},
        )
        return ContentCommit.model_validate(data)
