from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from src.models.file_upload import FileUploadOutcome, UploadSuccess


class UploadState(str, Enum):
    """
    Lifecycle of a queued file: idle -> uploading -> succeeded | failed
    """
    idle = 'idle'
    uploading = 'uploading'
    succeeded = 'succeeded'
    failed = 'failed'


class UploadStatus(BaseModel):
    """
    Client-side status of one queued file.

    Use the constructors rather than building directly:

    ```
    UploadStatus.idle()
    UploadStatus.uploading()
    UploadStatus.succeeded(outcome)
    UploadStatus.failed('Network error')
    ```
    """
    model_config = ConfigDict(frozen=True)

    state: UploadState = UploadState.idle
    outcome: Optional[UploadSuccess] = None
    message: Optional[str] = None

    @model_validator(mode='after')
    def check_state_payload(self) -> 'UploadStatus':
        if self.state == UploadState.succeeded:
            if self.outcome is None or self.message is not None:
                raise ValueError('succeeded status carries an outcome and no message')
        elif self.state == UploadState.failed:
            if not self.message or self.outcome is not None:
                raise ValueError('failed status carries a message and no outcome')
        elif self.outcome is not None or self.message is not None:
            raise ValueError(f'{self.state.value} status carries no outcome or message')
        return self

    @classmethod
    def idle(cls) -> 'UploadStatus':
        return cls(state=UploadState.idle)

    @classmethod
    def uploading(cls) -> 'UploadStatus':
        return cls(state=UploadState.uploading)

    @classmethod
    def succeeded(cls, outcome: UploadSuccess) -> 'UploadStatus':
        return cls(state=UploadState.succeeded, outcome=outcome)

    @classmethod
    def failed(cls, message: str) -> 'UploadStatus':
        return cls(state=UploadState.failed, message=message)

    @classmethod
    def from_outcome(cls, outcome: FileUploadOutcome) -> 'UploadStatus':
        if isinstance(outcome, UploadSuccess):
            return cls.succeeded(outcome)
        return cls.failed(outcome.error)

    @property
    def is_terminal(self) -> bool:
        return self.state in (UploadState.succeeded, UploadState.failed)
