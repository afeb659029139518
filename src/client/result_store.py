from src.models.file_upload import BatchResult


class ResultStore:
    """
    Holds the most recent batch result for display. In memory only.
    """

    def __init__(self):
        self._latest: BatchResult | None = None

    @property
    def latest(self) -> BatchResult | None:
        return self._latest

    def replace(self, batch_result: BatchResult):
        self._latest = batch_result

    def clear(self):
        self._latest = None
