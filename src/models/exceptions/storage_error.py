class StorageError(Exception):
    """
    Raised by the object store gateway when a write or presign against the backend fails.
    """
    def __init__(self, message, key=None):
        self.message = message
        self.key = key
        super().__init__(message)


class StorageConfigurationError(Exception):
    def __init__(self, message, missing=None):
        self.message = message
        self.missing = missing or []
        super().__init__(message)
