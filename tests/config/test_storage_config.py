import pytest

from src.config.storage_config import StorageConfig
from src.models.exceptions.storage_error import StorageConfigurationError


def test_from_env(storage_env):
    config = StorageConfig.from_env()

    assert config.bucket_name == 'test_bucket'
    assert config.endpoint_url == 'http://localhost:4566'
    assert config.access_key_id == 'your_access_key_id'
    assert config.secret_access_key == 'your_secret_access_key'
    assert config.region_name == 'auto'
    assert config.url_ttl == 60 * 60 * 24
    assert config.operation_timeout == 30.0


def test_from_env_overrides(storage_env, monkeypatch):
    monkeypatch.setenv('STORAGE_REGION', 'eu-west-2')
    monkeypatch.setenv('PRESIGNED_URL_TTL', '3600')
    monkeypatch.setenv('STORAGE_OPERATION_TIMEOUT', '2.5')

    config = StorageConfig.from_env()

    assert config.region_name == 'eu-west-2'
    assert config.url_ttl == 3600
    assert config.operation_timeout == 2.5


def test_from_env_names_every_missing_variable(storage_env, monkeypatch):
    monkeypatch.delenv('STORAGE_ENDPOINT_URL')
    monkeypatch.setenv('STORAGE_SECRET_ACCESS_KEY', '')

    with pytest.raises(StorageConfigurationError) as ex:
        StorageConfig.from_env()

    assert ex.value.missing == ['STORAGE_ENDPOINT_URL', 'STORAGE_SECRET_ACCESS_KEY']
    assert 'STORAGE_ENDPOINT_URL' in ex.value.message
    assert 'STORAGE_SECRET_ACCESS_KEY' in ex.value.message


@pytest.mark.parametrize("ttl", ["0", "-5", "a day"])
def test_from_env_rejects_invalid_ttl(storage_env, monkeypatch, ttl):
    monkeypatch.setenv('PRESIGNED_URL_TTL', ttl)

    with pytest.raises(StorageConfigurationError):
        StorageConfig.from_env()


def test_credentials_not_in_repr(storage_config):
    assert 'your_secret_access_key' not in repr(storage_config)
