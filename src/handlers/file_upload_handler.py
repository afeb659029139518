import asyncio
from typing import Sequence

import structlog
from fastapi import UploadFile

from src.models.exceptions.storage_error import StorageError
from src.models.file_upload import (
    GENERIC_CONTENT_TYPE, FileUploadOutcome, UploadFailure, UploadResponse, UploadSuccess
)
from src.services.object_store_gateway import ObjectAccess, ObjectStoreGateway
from src.utils.storage_keys import make_storage_key

logger = structlog.get_logger()

PROCESSED_MESSAGE = 'Files processed'


class UploadHandler:
    """
    Writes each file of a batch to the object store and presigns a download URL for it.

    Every file gets exactly one outcome, in the order the files were received. A failure for one file is
    recorded in its outcome and processing carries on with the next one.
    """

    def __init__(self, gateway: ObjectStoreGateway, url_ttl: int | None = None,
                 operation_timeout: float | None = None):
        self.gateway = gateway
        self.url_ttl = url_ttl if url_ttl is not None else gateway.storage_config.url_ttl
        self.operation_timeout = operation_timeout if operation_timeout is not None \
            else gateway.storage_config.operation_timeout

    async def handle_batch(self, files: Sequence[UploadFile]) -> UploadResponse:
        logger.info(f'Processing batch of {len(files)} file(s)')
        results = []
        for position, file in enumerate(files):
            outcome = await self.handle_file(file, position)
            results.append(outcome)

        failures = sum(1 for outcome in results if isinstance(outcome, UploadFailure))
        if failures:
            logger.warning(f'{failures} of {len(results)} file(s) failed to upload')
        return UploadResponse(message=PROCESSED_MESSAGE, results=results)

    async def handle_file(self, file: UploadFile, position: int = 0) -> FileUploadOutcome:
        original_name = file.filename or ''
        try:
            content = await file.read()
        except Exception as e:
            logger.exception(f"Error reading file number {position + 1} ({original_name}): {e.__class__.__name__}")
            return UploadFailure(original_name=original_name, error='The uploaded file could not be read')

        declared_type = file.content_type or ''
        storage_key = make_storage_key(original_name)
        logger.info(f"Uploading file number {position + 1}: {original_name} as {storage_key}")

        try:
            await self._bounded(self.gateway.write, storage_key, content, declared_type or GENERIC_CONTENT_TYPE)
            url = await self._bounded(self.gateway.presign, storage_key, self.url_ttl, ObjectAccess.public_read)
        except StorageError as e:
            return UploadFailure(original_name=original_name, error=e.message)
        except asyncio.TimeoutError:
            logger.error(f"Timed out after {self.operation_timeout}s storing {storage_key}")
            return UploadFailure(original_name=original_name, error='Timed out storing the file')
        except Exception as e:
            logger.exception(f"Unexpected error uploading {original_name}: {e.__class__.__name__} - {e}")
            return UploadFailure(original_name=original_name, error=str(e) or 'Failed to upload file')

        return UploadSuccess(
            original_name=original_name,
            size=len(content),
            content_type=declared_type,
            storage_key=storage_key,
            url=url
        )

    async def _bounded(self, func, *args):
        # boto3 is blocking, so each call runs in a worker thread with its own deadline
        return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.operation_timeout)
