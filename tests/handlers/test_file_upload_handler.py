import asyncio
import re
import time
from unittest.mock import AsyncMock

import pytest
from fastapi import UploadFile

from src.handlers.file_upload_handler import UploadHandler
from src.models.exceptions.storage_error import StorageError
from src.models.file_upload import UploadFailure, UploadSuccess
from src.services.object_store_gateway import ObjectAccess
from tests.conftest import make_upload_file


# =========================== SUCCESS =========================== #


@pytest.mark.asyncio
async def test_handle_file_success(gateway_mock):
    handler = UploadHandler(gateway_mock)

    outcome = await handler.handle_file(make_upload_file("photo.png", bytes(2048), "image/png"))

    assert isinstance(outcome, UploadSuccess)
    assert outcome.original_name == "photo.png"
    assert outcome.size == 2048
    assert outcome.content_type == "image/png"
    assert re.fullmatch(r"uploads/\d+-[0-9a-f]{8}-photo\.png", outcome.storage_key)
    assert outcome.url == f"https://storage.test/test_bucket/{outcome.storage_key}?X-Amz-Expires=86400"
    gateway_mock.write.assert_called_once_with(outcome.storage_key, bytes(2048), "image/png")
    gateway_mock.presign.assert_called_once_with(outcome.storage_key, 86400, ObjectAccess.public_read)


@pytest.mark.asyncio
async def test_handle_file_without_content_type_is_stored_as_binary(gateway_mock):
    handler = UploadHandler(gateway_mock)

    outcome = await handler.handle_file(make_upload_file("data", b"\x00\x01", content_type=None))

    assert isinstance(outcome, UploadSuccess)
    # The declared type is reported as it was received, only the stored object gets the generic type
    assert outcome.content_type == ""
    gateway_mock.write.assert_called_once_with(outcome.storage_key, b"\x00\x01", "application/octet-stream")


@pytest.mark.asyncio
async def test_handle_file_uses_configured_ttl(gateway_mock):
    handler = UploadHandler(gateway_mock, url_ttl=600)

    outcome = await handler.handle_file(make_upload_file("short.txt"))

    gateway_mock.presign.assert_called_once_with(outcome.storage_key, 600, ObjectAccess.public_read)


@pytest.mark.asyncio
async def test_handle_file_strips_directories_from_key(gateway_mock):
    handler = UploadHandler(gateway_mock)

    outcome = await handler.handle_file(make_upload_file("../../etc/passwd"))

    assert outcome.original_name == "../../etc/passwd"
    assert outcome.storage_key.startswith("uploads/")
    assert outcome.storage_key.endswith("-passwd")
    assert ".." not in outcome.storage_key


@pytest.mark.asyncio
async def test_handle_batch_empty(gateway_mock):
    handler = UploadHandler(gateway_mock)

    response = await handler.handle_batch([])

    assert response.message == "Files processed"
    assert response.results == []


@pytest.mark.asyncio
async def test_handle_batch_same_file_twice_is_two_outcomes(gateway_mock):
    handler = UploadHandler(gateway_mock)
    files = [make_upload_file("dup.txt", b"same"), make_upload_file("dup.txt", b"same")]

    response = await handler.handle_batch(files)

    first, second = response.results
    assert first.storage_key != second.storage_key
    assert gateway_mock.write.call_count == 2


# =========================== FAILURES =========================== #


@pytest.mark.asyncio
async def test_handle_batch_isolates_write_failure(gateway_mock):
    def write(key, content, content_type):
        if content == b"broken":
            raise StorageError("Storage rejected the file: Access Denied", key)

    gateway_mock.write.side_effect = write
    handler = UploadHandler(gateway_mock)
    files = [make_upload_file("a.txt", b"fine"), make_upload_file("b.txt", b"broken"), make_upload_file("c.txt")]

    response = await handler.handle_batch(files)

    assert [type(r) for r in response.results] == [UploadSuccess, UploadFailure, UploadSuccess]
    assert [r.original_name for r in response.results] == ["a.txt", "b.txt", "c.txt"]
    assert response.results[1].error == "Storage rejected the file: Access Denied"
    assert gateway_mock.presign.call_count == 2


@pytest.mark.asyncio
async def test_handle_file_presign_failure(gateway_mock):
    gateway_mock.presign.side_effect = StorageError("Could not create a download link: no credentials")
    handler = UploadHandler(gateway_mock)

    outcome = await handler.handle_file(make_upload_file("a.txt"))

    assert outcome == UploadFailure(original_name="a.txt", error="Could not create a download link: no credentials")


@pytest.mark.asyncio
async def test_handle_file_unexpected_error(gateway_mock):
    gateway_mock.write.side_effect = RuntimeError("Unexpected failure")
    handler = UploadHandler(gateway_mock)

    outcome = await handler.handle_file(make_upload_file("a.txt"))

    assert outcome == UploadFailure(original_name="a.txt", error="Unexpected failure")


@pytest.mark.asyncio
async def test_handle_file_timeout_only_fails_that_file(gateway_mock):
    def write(key, content, content_type):
        if content == b"slow":
            time.sleep(0.5)

    gateway_mock.write.side_effect = write
    handler = UploadHandler(gateway_mock, operation_timeout=0.05)
    files = [make_upload_file("slow.txt", b"slow"), make_upload_file("fast.txt", b"fast")]

    response = await handler.handle_batch(files)

    assert response.results[0] == UploadFailure(original_name="slow.txt", error="Timed out storing the file")
    assert isinstance(response.results[1], UploadSuccess)


@pytest.mark.asyncio
async def test_handle_file_unreadable_upload(gateway_mock):
    file = AsyncMock(spec=UploadFile)
    file.filename = "gone.txt"
    file.content_type = "text/plain"
    file.read.side_effect = OSError("stream closed")
    handler = UploadHandler(gateway_mock)

    outcome = await handler.handle_file(file)

    assert outcome == UploadFailure(original_name="gone.txt", error="The uploaded file could not be read")
    gateway_mock.write.assert_not_called()


@pytest.mark.asyncio
async def test_handle_batch_all_failures_still_returns_every_file(unreachable_gateway_mock):
    handler = UploadHandler(unreachable_gateway_mock)
    files = [make_upload_file(f"file{n}.txt") for n in range(5)]

    response = await asyncio.wait_for(handler.handle_batch(files), timeout=5)

    assert len(response.results) == 5
    assert all(isinstance(r, UploadFailure) for r in response.results)
