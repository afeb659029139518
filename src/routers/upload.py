import os

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.datastructures import UploadFile

from src.dependencies import get_upload_handler
from src.handlers.file_upload_handler import UploadHandler
from src.models.file_upload import UploadResponse

router = APIRouter()
logger = structlog.get_logger()

FILES_FIELD = 'files'
DEFAULT_MAX_FILES_PER_REQUEST = 10000


def get_max_files_per_request() -> int:
    return int(os.getenv('MAX_FILES_PER_REQUEST', str(DEFAULT_MAX_FILES_PER_REQUEST)))


@router.post("/api/upload", response_model=UploadResponse)
async def upload(request: Request, handler: UploadHandler = Depends(get_upload_handler)) -> UploadResponse:
    """
    Store every file sent under the multipart field `files` and return one result per file, in the order sent.

    The status code only reflects whether the request could be processed, it is 200 even when every
    file failed. Check each result:

    ```
    {"message": "Files processed",
     "results": [{"originalName": "photo.png", "size": 2048, "type": "image/png",
                  "s3Key": "uploads/1717171717171-1a2b3c4d-photo.png", "url": "https://..."},
                 {"originalName": "notes.txt", "error": "Storage backend unavailable: ..."}]}
    ```

    A request with no files gets an empty results list. A body that cannot be parsed as form data,
    or that carries more than MAX_FILES_PER_REQUEST files (10000 by default), gets 400.
    """
    max_parts = get_max_files_per_request()
    try:
        form = await request.form(max_files=max_parts, max_fields=max_parts)
    except StarletteHTTPException:
        raise
    except Exception as e:
        logger.error(f"Unable to parse upload request: {e.__class__.__name__} {e}")
        raise HTTPException(status_code=400, detail="Request body could not be parsed as multipart form data")

    try:
        parts = form.getlist(FILES_FIELD)
        files = [part for part in parts if isinstance(part, UploadFile)]
        if len(files) < len(parts):
            logger.warning(f"Ignoring {len(parts) - len(files)} non-file value(s) in the '{FILES_FIELD}' field")
        if not files:
            logger.info("Upload request contained no files")
        return await handler.handle_batch(files)
    finally:
        await form.close()
