"""
FastAPI application entry point.
Loads env vars, wires middleware and mounts the routers.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.middleware.sessions import SessionMiddleware

# Load .env from project root, regardless of where the app is started from
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

from pdfhub.config import SESSION_TTL_SECONDS, Settings
from pdfhub.errors import AppError, app_error_handler
from pdfhub.routers import auth, files


def create_app(
    settings: Optional[Settings] = None,
    github_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application.

    github_transport is handed to every httpx client that talks to GitHub;
    None means the real network.
    """
    settings = settings or Settings()

    app = FastAPI(title="PDF Hub")
    app.state.settings = settings
    app.state.github_transport = github_transport

    # ---------------------------------------------------------
    # Middleware (CORS outermost so error responses carry the headers)
    # ---------------------------------------------------------
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        session_cookie="session",
        max_age=SESSION_TTL_SECONDS,
        same_site="lax",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)

    app.include_router(auth.router, tags=["Auth"])
    app.include_router(files.router, tags=["Files"])

    @app.get("/", response_class=PlainTextResponse)
    def read_root():
        return "Server is running"

    return app


app = create_app()
