import base64
import hashlib

import structlog

logger = structlog.get_logger()


def get_checksum(content: bytes, algorithm: str = "sha256") -> str:
    """
    Hex digest of an in-memory payload.
    """
    digest_object = hashlib.new(algorithm, content)
    return digest_object.hexdigest()


def hex_string_to_base64_encoded_bytes(hexstring: str) -> str:
    """
    Convert string of hexadecimal digits to string of base 64 encoded bytes.
    Note input string must have even number of characters.

    e.g. converts "123abc" to "Ejq8"

    Needed because boto3's S3 client's put_object method only accepts checksums in this format.
    """
    as_bytes = bytes.fromhex(hexstring)
    as_64bit = base64.b64encode(as_bytes).decode()
    return as_64bit
