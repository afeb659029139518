import os

import httpx
import structlog
from pydantic import ValidationError

from src.models.exceptions.transport_error import TransportError
from src.models.file_upload import FileUploadOutcome, UploadResponse
from src.models.pending_file import PendingFile

logger = structlog.get_logger()

UPLOAD_PATH = '/api/upload'


def get_api_url() -> str:
    return os.getenv('UPLOAD_API_URL', 'http://127.0.0.1:8000')


def get_request_timeout() -> float:
    return float(os.getenv('UPLOAD_REQUEST_TIMEOUT', '60'))


class UploadApiClient:
    """
    Sends files to POST /api/upload, one file per request, and turns the response into that file's outcome.

    Anything that stops a usable outcome coming back (connection failure, timeout, error status,
    unexpected body) is raised as TransportError.

    ```
    async with UploadApiClient('http://127.0.0.1:8000') as api_client:
        outcome = await api_client.upload(PendingFile.from_path('photo.png'))
    ```
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None,
                 http_client: httpx.AsyncClient | None = None):
        if http_client is None:
            http_client = httpx.AsyncClient(
                base_url=base_url or get_api_url(),
                timeout=timeout if timeout is not None else get_request_timeout()
            )
        self.http_client = http_client

    async def __aenter__(self) -> 'UploadApiClient':
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self.http_client.aclose()

    async def upload(self, pending_file: PendingFile) -> FileUploadOutcome:
        # An empty declared type is sent as is, otherwise httpx substitutes a guess from the name
        file_tuple = (pending_file.name, pending_file.content, pending_file.declared_type)
        try:
            response = await self.http_client.post(UPLOAD_PATH, files=[('files', file_tuple)])
        except httpx.HTTPError as e:
            logger.error(f"{e.__class__.__name__} sending {pending_file.name}: {e}")
            raise TransportError(f"Could not reach the upload service: {e.__class__.__name__}",
                                 pending_file.name) from e

        if response.status_code != 200:
            logger.error(f"Upload of {pending_file.name} returned HTTP {response.status_code}")
            raise TransportError(f"Upload service returned HTTP {response.status_code}", pending_file.name)

        try:
            upload_response = UploadResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Unreadable response uploading {pending_file.name}: {e}")
            raise TransportError("Upload service returned an unreadable response", pending_file.name) from e

        if len(upload_response.results) != 1:
            raise TransportError(
                f"Expected 1 result from the upload service, got {len(upload_response.results)}",
                pending_file.name
            )
        return upload_response.results[0]
