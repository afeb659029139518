import posixpath
import secrets
import time

UPLOAD_PREFIX = 'uploads'


def safe_filename(filename: str | None) -> str:
    """
    Last path component of a client supplied name, so it cannot escape the upload prefix.
    """
    name = posixpath.basename((filename or '').replace('\\', '/')).strip()
    if name in ('', '.', '..'):
        return 'unnamed'
    return name


def make_storage_key(filename: str | None, timestamp_ms: int | None = None) -> str:
    """
    Builds `uploads/<millis>-<random>-<name>`.

    The random suffix keeps keys distinct when the same name is uploaded twice within one millisecond.
    """
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    return f"{UPLOAD_PREFIX}/{timestamp_ms}-{secrets.token_hex(4)}-{safe_filename(filename)}"
