"""
Notes API - Image File Route
============================

What:  GET /uploads/{path} serves stored note images.
How:   The note's `image` field (uploads/notes/note-<uuid>.png) doubles as
       the URL path. FileService.locate() keeps lookups inside the upload
       directory; FileResponse picks the media type from the extension.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from notes_api.dependencies import get_file_service
from notes_api.schemas.common import ErrorResponse
from notes_api.services.file_service import FileService

router = APIRouter(tags=["Files"])


@router.get(
    "/uploads/{file_path:path}",
    response_class=FileResponse,
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve an uploaded note image",
)
async def serve_file(
    file_path: str,
    files: FileService = Depends(get_file_service),
) -> FileResponse:
    path = files.locate(f"uploads/{file_path}")
    return FileResponse(
        path=str(path),
        headers={"Cache-Control": "private, max-age=86400"},
    )
