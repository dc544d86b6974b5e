"""
Pydantic models for request/response bodies and the session payload.
This is the source of truth for the JSON shapes the front end sees.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from pdfhub.github import UserProfile


class SessionData(BaseModel):
    access_token: str
    user: UserProfile
    issued_at: float


class StoredFile(BaseModel):
    name: str
    path: str
    url: Optional[str] = None


class UploadResponse(BaseModel):
    success: bool = True
    url: str


class DeleteRequest(BaseModel):
    fileName: Optional[str] = None


class DeleteResponse(BaseModel):
    success: bool = True
    file: str
    commit: dict[str, Any]


class ProvisionResult(BaseModel):
    status: Literal["existing", "created"]
    owner_login: str


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Client-facing error message")
