import mimetypes
import pathlib
import uuid

from pydantic import BaseModel, ConfigDict, Field


def generate_file_id() -> str:
    return uuid.uuid4().hex


class PendingFile(BaseModel):
    """
    A file selected for upload but not yet submitted.

    The id is generated when the file is selected, so status tracking does not depend on the file's
    position in the pending list. Names need not be unique.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_file_id)
    name: str
    content: bytes = Field(repr=False)
    declared_type: str = ''

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: str | pathlib.Path, name: str | None = None) -> 'PendingFile':
        path = pathlib.Path(path)
        # read_bytes opens and closes the handle, nothing is held open while the file waits in the queue
        content = path.read_bytes()
        mimetype, _ = mimetypes.guess_type(path.name)
        return cls(name=name or path.name, content=content, declared_type=mimetype or '')
