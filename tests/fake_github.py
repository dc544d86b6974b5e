"""
In-memory stand-in for the slice of GitHub the service talks to.

Serves the OAuth token endpoint, /user, repos and the Contents API through
httpx.MockTransport. Every request is recorded in `calls` so tests can
assert that nothing went out. The handler yields to the event loop once per
request, which lets concurrent requests interleave the way real network
calls would.
"""

import asyncio
import base64
import hashlib
import json
import re
from typing import Callable, Optional

import httpx

__all__ = ["FakeGitHub"]

_CONTENTS_RE = re.compile(r"^/repos/(?P<owner>[^/]+)/(?P<repo>[^/]+)/contents/(?P<path>.+)$")
_REPO_RE = re.compile(r"^/repos/(?P<owner>[^/]+)/(?P<repo>[^/]+)$")


class FakeGitHub:
    def __init__(self) -> None:
        self.codes: dict[str, str] = {}        # oauth code -> token
        self.users: dict[str, dict] = {}       # token -> user payload
        self.repos: dict[str, dict] = {}       # "owner/repo" -> repo payload
        self.files: dict[tuple[str, str], dict] = {}  # (full_repo, path) -> {"sha", "content"}
        self.calls: list[tuple[str, str]] = []
        self.fail: dict[tuple[str, str], int] = {}   # (method, path) -> forced status
        self.before_delete: Optional[Callable[[str, str], None]] = None
        self.repo_created_elsewhere = False
        self._commits = 0

    # --- seeding ------------------------------------------------------

    def add_user(self, login: str, token: str, code: Optional[str] = None) -> None:
        self.users[token] = {"login": login, "id": len(self.users) + 1, "name": login.title(),
                             "avatar_url": f"https://avatars.example/{login}",
                             "public_repos": 2}
        if code:
            self.codes[code] = token

    def add_repo(self, owner: str, name: str = "pdf-storage") -> None:
        self.repos[f"{owner}/{name}"] = {"name": name, "full_name": f"{owner}/{name}",
                                         "private": False, "default_branch": "main"}

    def add_file(self, owner: str, path: str, content: bytes, repo: str = "pdf-storage") -> str:
        sha = hashlib.sha1(content + str(len(self.files)).encode()).hexdigest()
        self.files[(f"{owner}/{repo}", path)] = {"sha": sha, "content": content}
        return sha

    def paths(self, owner: str, repo: str = "pdf-storage") -> list[str]:
        return sorted(p for (r, p) in self.files if r == f"{owner}/{repo}")

    def calls_to(self, method: str) -> list[str]:
        return [path for m, path in self.calls if m == method]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    # --- dispatch -----------------------------------------------------

    async def handler(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0)

        method = request.method
        path = request.url.path
        self.calls.append((method, path))

        if (method, path) in self.fail:
            return httpx.Response(self.fail[(method, path)], json={"message": "Server Error"})

        if path.endswith("/login/oauth/access_token"):
            return self._access_token(request)

        user = self.users.get(request.headers.get("Authorization", "").replace("token ", "", 1))
        if user is None:
            return httpx.Response(401, json={"message": "Bad credentials"})

        if path == "/user" and method == "GET":
            return httpx.Response(200, json=user)
        if path == "/user/repos" and method == "POST":
            return self._create_repo(user, json.loads(request.content))

        match = _CONTENTS_RE.match(path)
        if match:
            full = f"{match['owner']}/{match['repo']}"
            if full not in self.repos:
                return httpx.Response(404, json={"message": "Not Found"})
            body = json.loads(request.content) if request.content else {}
            if method == "GET":
                return self._get_contents(full, match["path"])
            if method == "PUT":
                return self._put_contents(full, match["path"], body)
            if method == "DELETE":
                return self._delete_contents(full, match["path"], body)

        match = _REPO_RE.match(path)
        if match and method == "GET":
            repo = self.repos.get(f"{match['owner']}/{match['repo']}")
            if repo is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json=repo)

        return httpx.Response(404, json={"message": "Not Found"})

    # --- endpoints ----------------------------------------------------

    def _access_token(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        token = self.codes.get(body.get("code"))
        if token is None:
            return httpx.Response(200, json={"error": "bad_verification_code",
                                             "error_description": "The code passed is incorrect or expired."})
        return httpx.Response(200, json={"access_token": token, "token_type": "bearer", "scope": "public_repo"})

    def _create_repo(self, user: dict, body: dict) -> httpx.Response:
        full = f"{user['login']}/{body['name']}"
        if full in self.repos or self.repo_created_elsewhere:
            self.add_repo(user["login"], body["name"])
            return httpx.Response(422, json={
                "message": "Repository creation failed.",
                "errors": [{"resource": "Repository", "field": "name",
                            "message": "name already exists on this account"}],
            })
        self.repos[full] = {"name": body["name"], "full_name": full, "private": body.get("private", False),
                            "description": body.get("description"), "default_branch": "main"}
        return httpx.Response(201, json=self.repos[full])

    def _entry(self, full: str, path: str) -> dict:
        owner, repo = full.split("/")
        stored = self.files[(full, path)]
        return {
            "name": path.rsplit("/", 1)[-1],
            "path": path,
            "sha": stored["sha"],
            "type": "file",
            "size": len(stored["content"]),
            "download_url": f"https://raw.githubusercontent.com/{owner}/{repo}/main/{path}",
        }

    def _get_contents(self, full: str, path: str) -> httpx.Response:
        if (full, path) in self.files:
            entry = self._entry(full, path)
            entry["content"] = base64.b64encode(self.files[(full, path)]["content"]).decode()
            return httpx.Response(200, json=entry)

        prefix = path.rstrip("/") + "/"
        listing = []
        subdirs = set()
        for (repo, p) in sorted(self.files):
            if repo != full or not p.startswith(prefix):
                continue
            rest = p[len(prefix):]
            if "/" in rest:
                subdirs.add(rest.split("/", 1)[0])
            else:
                listing.append(self._entry(full, p))
        for name in sorted(subdirs):
            listing.append({"name": name, "path": prefix + name, "sha": "0" * 40, "type": "dir",
                            "size": 0, "download_url": None})
        if not listing:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, json=listing)

    def _commit(self, message: str) -> dict:
        self._commits += 1
        return {"sha": f"{self._commits:040x}", "message": message}

    def _put_contents(self, full: str, path: str, body: dict) -> httpx.Response:
        existing = self.files.get((full, path))
        if existing and not body.get("sha"):
            return httpx.Response(422, json={"message": "Invalid request.\n\n\"sha\" wasn't supplied."})
        if existing and body["sha"] != existing["sha"]:
            return httpx.Response(409, json={"message": f"{path} does not match {body['sha']}"})

        content = base64.b64decode(body["content"])
        sha = hashlib.sha1(content + path.encode()).hexdigest()
        self.files[(full, path)] = {"sha": sha, "content": content}
        return httpx.Response(200 if existing else 201,
                              json={"content": self._entry(full, path), "commit": self._commit(body["message"])})

    def _delete_contents(self, full: str, path: str, body: dict) -> httpx.Response:
        if self.before_delete is not None:
            hook, self.before_delete = self.before_delete, None
            hook(full, path)

        existing = self.files.get((full, path))
        if existing is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if body.get("sha") != existing["sha"]:
            return httpx.Response(409, json={"message": f"{path} does not match {body.get('sha')}"})

        del self.files[(full, path)]
        return httpx.Response(200, json={"content": None, "commit": self._commit(body["message"])})
