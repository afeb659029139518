from enum import Enum

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from src.config.storage_config import StorageConfig
from src.models.exceptions.storage_error import StorageError
from src.models.status_report import ServiceObservations, Outcome
from src.services.checksum_service import get_checksum, hex_string_to_base64_encoded_bytes
from src.services.status_service import StatusReporter

logger = structlog.get_logger()


class ObjectAccess(str, Enum):
    """
    Access level requested for a presigned URL, sets the cache policy returned with the object.
    """
    public_read = 'public-read'
    private = 'private'


CACHE_CONTROL = {
    ObjectAccess.public_read: 'public',
    ObjectAccess.private: 'private, no-store',
}


class ObjectStoreGateway:
    """
    Wraps the single bucket uploads are written to.

    One instance is shared by every request for the lifetime of the process:
    `ObjectStoreGateway.get_instance()`
    """
    _instance = None

    @staticmethod
    def get_instance() -> 'ObjectStoreGateway':
        """ Static access method. Builds the gateway from the environment on first use. """
        if ObjectStoreGateway._instance is None:
            ObjectStoreGateway._instance = ObjectStoreGateway(StorageConfig.from_env())
        return ObjectStoreGateway._instance

    @staticmethod
    def clear_cache():
        if ObjectStoreGateway._instance is not None:
            logger.info('Clearing cached ObjectStoreGateway instance')
        ObjectStoreGateway._instance = None

    def __init__(self, storage_config: StorageConfig):
        self.storage_config = storage_config
        self.s3_client = self.get_s3_client()

    @property
    def bucket_name(self) -> str:
        return self.storage_config.bucket_name

    def get_s3_client(self):
        timeout = self.storage_config.operation_timeout
        return boto3.client(
            's3',
            region_name=self.storage_config.region_name,
            aws_access_key_id=self.storage_config.access_key_id,
            aws_secret_access_key=self.storage_config.secret_access_key,
            endpoint_url=self.storage_config.endpoint_url,
            config=Config(
                signature_version='s3v4',
                connect_timeout=timeout,
                read_timeout=timeout,
                retries={'max_attempts': 3, 'mode': 'standard'}
            )
        )

    def write(self, key: str, content: bytes, content_type: str) -> None:
        """
        Store content under key, overwriting any object already there.
        Raises StorageError if the backend did not confirm the write.
        """
        if not key:
            raise StorageError('Storage key must not be empty', key)
        logger.debug(f"Writing {len(content)} bytes to {key} in bucket {self.bucket_name}")
        checksum = get_checksum(content)
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type,
                ChecksumAlgorithm='SHA256',
                ChecksumSHA256=hex_string_to_base64_encoded_bytes(checksum)
            )
        except ClientError as e:
            error = e.response.get('Error', {})
            message = error.get('Message') or error.get('Code') or str(e)
            logger.error(f"{e.__class__.__name__} writing {key} to bucket {self.bucket_name}: {message}")
            raise StorageError(f"Storage rejected the file: {message}", key) from e
        except BotoCoreError as e:
            logger.error(f"{e.__class__.__name__} writing {key} to bucket {self.bucket_name}: {e}")
            raise StorageError(f"Storage backend unavailable: {e}", key) from e

    def presign(self, key: str, ttl: int | None = None, access: ObjectAccess = ObjectAccess.public_read) -> str:
        """
        Signed GET URL for key, valid for ttl seconds (configured TTL when not given).
        Does not check the object exists.
        """
        if ttl is None:
            ttl = self.storage_config.url_ttl
        if ttl <= 0:
            raise ValueError(f"Presigned URL ttl must be positive, got {ttl}")
        access = ObjectAccess(access)
        try:
            return self.s3_client.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': key,
                    'ResponseCacheControl': CACHE_CONTROL[access]
                },
                ExpiresIn=ttl
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"{e.__class__.__name__} presigning {key} in bucket {self.bucket_name}: {e}")
            raise StorageError(f"Could not create a download link: {e}", key) from e


class ObjectStoreStatusReporter(StatusReporter):
    label = 'storage'

    @classmethod
    def get_status(cls) -> ServiceObservations:
        """
        Configured if the gateway can be built from the environment.
        Reachable if the configured bucket responds.
        """
        checks = ServiceObservations(label=cls.label)
        configured, reachable = checks.add_checks('configured', 'reachable')

        try:
            gateway = ObjectStoreGateway.get_instance()
            configured.outcome = Outcome.success
            gateway.s3_client.head_bucket(Bucket=gateway.bucket_name)
            reachable.outcome = Outcome.success
        except Exception as e:
            logger.exception(f'Status check {cls.label} failed: {e.__class__.__name__} {e}')

        return checks
