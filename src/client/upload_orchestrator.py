import asyncio
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

import structlog

from src.client.result_store import ResultStore
from src.client.upload_api_client import UploadApiClient
from src.models.exceptions.transport_error import TransportError, UploadInProgressError
from src.models.file_upload import BatchResult, FileUploadOutcome, UploadFailure
from src.models.pending_file import PendingFile, generate_file_id
from src.models.upload_status import UploadState, UploadStatus

logger = structlog.get_logger()

TRANSPORT_FAILURE_MESSAGE = 'Upload failed, the file could not be sent to the upload service'

StatusListener = Callable[[PendingFile, UploadStatus], None]


class UploadOrchestrator:
    """
    Client-side owner of the files waiting to be uploaded.

    The presentation layer only reads `pending`, `statuses` and `result_store.latest`, and changes
    state through `add`, `remove` and `submit_all`.

    `submit_all` sends every pending file in its own request, concurrently, and returns once all of
    them have settled. The returned BatchResult is in the order the files were pending when the batch
    started, whatever order the responses arrive in.
    """

    def __init__(self, api_client: UploadApiClient, result_store: ResultStore | None = None,
                 status_listener: StatusListener | None = None, max_concurrency: int | None = None):
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self.api_client = api_client
        self.result_store = result_store or ResultStore()
        self.status_listener = status_listener
        self.max_concurrency = max_concurrency
        self._pending: list[PendingFile] = []
        self._statuses: dict[str, UploadStatus] = {}
        self._in_flight: set[str] = set()
        self._submitting = False

    @property
    def pending(self) -> tuple[PendingFile, ...]:
        return tuple(self._pending)

    @property
    def statuses(self) -> Mapping[str, UploadStatus]:
        return MappingProxyType(dict(self._statuses))

    @property
    def is_uploading(self) -> bool:
        return self._submitting

    def status_of(self, file_id: str) -> UploadStatus | None:
        return self._statuses.get(file_id)

    def add(self, files: Iterable[PendingFile]) -> list[str]:
        """
        Queue files for the next batch. Returns the ids they are tracked under.
        """
        known_ids = {pending_file.id for pending_file in self._pending}
        added_ids = []
        for pending_file in files:
            if pending_file.id in known_ids:
                # The same selection added twice is two uploads, each needs its own id
                pending_file = pending_file.model_copy(update={'id': generate_file_id()})
            known_ids.add(pending_file.id)
            self._pending.append(pending_file)
            self._set_status(pending_file, UploadStatus.idle())
            added_ids.append(pending_file.id)
        logger.debug(f"Added {len(added_ids)} file(s), {len(self._pending)} pending")
        return added_ids

    def remove(self, index: int) -> bool:
        """
        Remove the pending file at index. No-op once that file is uploading.
        """
        if not 0 <= index < len(self._pending):
            logger.warning(f"No pending file at index {index}")
            return False
        return self.remove_by_id(self._pending[index].id)

    def remove_by_id(self, file_id: str) -> bool:
        if file_id in self._in_flight:
            logger.warning(f"File {file_id} is uploading and cannot be removed")
            return False
        remaining = [pending_file for pending_file in self._pending if pending_file.id != file_id]
        if len(remaining) == len(self._pending):
            return False
        self._pending = remaining
        self._statuses.pop(file_id, None)
        return True

    async def submit_all(self) -> BatchResult:
        if self._submitting:
            raise UploadInProgressError('A batch is already uploading')

        batch = list(self._pending)
        logger.info(f"Submitting batch of {len(batch)} file(s)")
        self._submitting = True
        self._statuses = {}
        self._in_flight = {pending_file.id for pending_file in batch}
        for pending_file in batch:
            self._set_status(pending_file, UploadStatus.uploading())

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        try:
            # Each upload records its own failure, so gather never sees an exception from a single file
            outcomes = await asyncio.gather(*(self._upload_one(pending_file, semaphore) for pending_file in batch))
        finally:
            self._submitting = False
            self._in_flight = set()

        batch_result = BatchResult(list(outcomes))
        self.result_store.replace(batch_result)

        submitted_ids = {pending_file.id for pending_file in batch}
        self._pending = [pending_file for pending_file in self._pending if pending_file.id not in submitted_ids]
        self._statuses = {
            file_id: status for file_id, status in self._statuses.items() if file_id not in submitted_ids
        }
        logger.info(f"Batch settled: {len(batch_result.succeeded)} succeeded, {len(batch_result.failed)} failed")
        return batch_result

    async def _upload_one(self, pending_file: PendingFile, semaphore: asyncio.Semaphore | None) -> FileUploadOutcome:
        try:
            if semaphore is None:
                outcome = await self.api_client.upload(pending_file)
            else:
                async with semaphore:
                    outcome = await self.api_client.upload(pending_file)
        except TransportError as e:
            logger.warning(f"Transport error uploading {pending_file.name}: {e.message}")
            outcome = UploadFailure(original_name=pending_file.name, error=TRANSPORT_FAILURE_MESSAGE)
        except Exception as e:
            logger.exception(f"Unexpected error uploading {pending_file.name}: {e.__class__.__name__} - {e}")
            outcome = UploadFailure(original_name=pending_file.name, error=TRANSPORT_FAILURE_MESSAGE)

        self._set_status(pending_file, UploadStatus.from_outcome(outcome))
        return outcome

    def _set_status(self, pending_file: PendingFile, status: UploadStatus):
        self._statuses[pending_file.id] = status
        if status.state != UploadState.idle:
            logger.debug(f"{pending_file.name} ({pending_file.id}) is {status.state.value}")
        if self.status_listener is not None:
            try:
                self.status_listener(pending_file, status)
            except Exception as e:
                logger.error(f"Error in upload status listener: {e.__class__.__name__} {e}")
