from typing import Iterator, List, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel

GENERIC_CONTENT_TYPE = 'application/octet-stream'


class UploadSuccess(BaseModel):
    """
    Outcome for a file that was written to the bucket and given a presigned URL.

    Serialised with the wire names: originalName, size, type, s3Key, url
    """
    model_config = ConfigDict(populate_by_name=True, extra='forbid', frozen=True)

    original_name: str = Field(alias='originalName')
    size: int = Field(ge=0)
    content_type: str = Field(default='', alias='type')
    storage_key: str = Field(alias='s3Key', min_length=1)
    url: str = Field(min_length=1)

    @property
    def succeeded(self) -> bool:
        return True


class UploadFailure(BaseModel):
    """
    Outcome for a file that could not be stored or could not be given a URL.

    Serialised with the wire names: originalName, error
    """
    model_config = ConfigDict(populate_by_name=True, extra='forbid', frozen=True)

    original_name: str = Field(alias='originalName')
    error: str = Field(min_length=1)

    @property
    def succeeded(self) -> bool:
        return False


# Both variants forbid extra fields, so a payload can only ever validate as one of them
FileUploadOutcome = Union[UploadSuccess, UploadFailure]


class UploadResponse(BaseModel):
    """
    Body returned by POST /api/upload. The status code is 200 even when some or all files failed,
    check each result for an `error` field.
    """
    message: str
    results: List[FileUploadOutcome]


class BatchResult(RootModel[List[FileUploadOutcome]]):
    """
    Ordered outcomes of one batch, where outcome i belongs to submitted file i.
    """
    root: List[FileUploadOutcome] = Field(default_factory=list)

    def __iter__(self) -> Iterator[FileUploadOutcome]:
        return iter(self.root)

    def __getitem__(self, item) -> FileUploadOutcome:
        return self.root[item]

    def __len__(self) -> int:
        return len(self.root)

    @property
    def succeeded(self) -> List[UploadSuccess]:
        return [outcome for outcome in self.root if isinstance(outcome, UploadSuccess)]

    @property
    def failed(self) -> List[UploadFailure]:
        return [outcome for outcome in self.root if isinstance(outcome, UploadFailure)]

    def has_failures(self) -> bool:
        return len(self.failed) > 0
