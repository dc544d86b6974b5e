"""
File endpoints. All of them sit behind the session gate.

POST /upload  multipart `pdf` field, committed under uploads/
GET  /files   PDFs currently in uploads/
PUT  /delete  JSON {"fileName": ...}, removes uploads/<fileName>
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from pydantic import ValidationError as PydanticValidationError

from pdfhub.deps import get_object_store
from pdfhub.errors import ValidationError
from pdfhub.schemas import DeleteRequest, DeleteResponse, ErrorResponse, StoredFile, UploadResponse
from pdfhub.services.storage import ObjectStore

router = APIRouter(responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})


async def _read_delete_request(request: Request) -> DeleteRequest:
    # Parsed by hand so a malformed body is a 400 {"error"} and never beats the 401
    raw = await request.body()
    if not raw.strip():
        return DeleteRequest()
    try:
        return DeleteRequest.model_validate(await request.json())
    except (ValueError, PydanticValidationError) as exc:
        raise ValidationError("File name is required") from exc


# ---------------------------------------------------------
# Endpoints
# ---------------------------------------------------------
@router.post("/upload", response_model=UploadResponse)
async def upload_pdf(
    store: ObjectStore = Depends(get_object_store),
    pdf: Optional[UploadFile] = File(None, description="PDF document, max 100MB"),
) -> UploadResponse:
    """Commit one PDF into the user's pdf-storage repo and return its raw URL."""
    return await store.upload(pdf)


@router.get("/files", response_model=list[StoredFile])
async def list_files(store: ObjectStore = Depends(get_object_store)) -> list[StoredFile]:
    """List uploaded PDFs. Empty until the first upload creates the folder."""
    return await store.list_files()


@router.put(
    "/delete",
    response_model=DeleteResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": DeleteRequest.model_json_schema()}},
        }
    },
)
async def delete_file(request: Request, store: ObjectStore = Depends(get_object_store)) -> DeleteResponse:
    """Delete uploads/<fileName> from the user's repo."""
    body = await _read_delete_request(request)
    return await store.delete(body.fileName)
