import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from src.models.exceptions.storage_error import StorageConfigurationError

load_dotenv()

# Field name -> environment variable, all of which must be set before the gateway can be built
REQUIRED_SETTINGS = {
    'bucket_name': 'STORAGE_BUCKET_NAME',
    'endpoint_url': 'STORAGE_ENDPOINT_URL',
    'access_key_id': 'STORAGE_ACCESS_KEY_ID',
    'secret_access_key': 'STORAGE_SECRET_ACCESS_KEY',
}

DEFAULT_URL_TTL = 60 * 60 * 24


class StorageConfig(BaseModel):
    """
    Connection details for the single bucket uploads are written to.
    Loaded once at startup, the rest of the service only sees the gateway built from it.
    """
    bucket_name: str = Field(min_length=1)
    endpoint_url: str = Field(min_length=1)
    access_key_id: str = Field(min_length=1, repr=False)
    secret_access_key: str = Field(min_length=1, repr=False)
    region_name: str = 'auto'
    url_ttl: int = Field(default=DEFAULT_URL_TTL, gt=0)
    operation_timeout: float = Field(default=30.0, gt=0)

    @classmethod
    def from_env(cls) -> 'StorageConfig':
        missing = [env_name for env_name in REQUIRED_SETTINGS.values() if not os.getenv(env_name)]
        if missing:
            raise StorageConfigurationError(
                f"Object storage is not configured, missing environment variable(s): {', '.join(missing)}",
                missing
            )

        settings = {field: os.getenv(env_name) for field, env_name in REQUIRED_SETTINGS.items()}
        settings['region_name'] = os.getenv('STORAGE_REGION', 'auto')
        settings['url_ttl'] = os.getenv('PRESIGNED_URL_TTL', str(DEFAULT_URL_TTL))
        settings['operation_timeout'] = os.getenv('STORAGE_OPERATION_TIMEOUT', '30')
        try:
            return cls.model_validate(settings)
        except ValidationError as e:
            raise StorageConfigurationError(f"Invalid object storage configuration: {e}") from e
