class TransportError(Exception):
    """
    Raised by the upload API client when a request could not be completed or its response could not be understood.
    """
    def __init__(self, message, filename=None):
        self.message = message
        self.filename = filename
        super().__init__(message)


class UploadInProgressError(Exception):
    pass
