"""
Environment-driven settings. Read once at app creation.
"""

import os

SESSION_TTL_SECONDS = 24 * 60 * 60


class Settings:
    def __init__(self) -> None:
        self.FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
        self.SESSION_SECRET = os.getenv("SESSION_SECRET", "dev-session-secret")
        self.GITHUB_CLIENT_ID = os.getenv("GITHUB_CLIENT_ID", "")
        self.GITHUB_CLIENT_SECRET = os.getenv("GITHUB_CLIENT_SECRET", "")
        self.PORT = int(os.getenv("PORT", "3000"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

        self.GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com")
        self.GITHUB_OAUTH_URL = os.getenv("GITHUB_OAUTH_URL", "https://github.com/login/oauth")
        self.GITHUB_RAW_URL = os.getenv("GITHUB_RAW_URL", "https://raw.githubusercontent.com")

    @property
    def oauth_redirect_uri(self) -> str:
        return f"http://localhost:{self.PORT}/auth/github/callback"
