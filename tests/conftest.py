from io import BytesIO

from fastapi import UploadFile
from starlette.datastructures import Headers

pytest_plugins = [
    "tests.fixtures.storage",
    "tests.fixtures.app",
]


def make_upload_file(filename: str, content: bytes = b"abc123", content_type: str | None = "text/plain") -> UploadFile:
    "Create an UploadFile as FastAPI would hand it to the handler"
    headers = Headers({"content-type": content_type}) if content_type else Headers({})
    return UploadFile(file=BytesIO(content), filename=filename, headers=headers)
