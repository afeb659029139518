from fastapi import Depends

from src.handlers.file_upload_handler import UploadHandler
from src.services.object_store_gateway import ObjectStoreGateway


def get_object_store_gateway() -> ObjectStoreGateway:
    """
    The process-wide gateway, built from the environment on first use.
    """
    return ObjectStoreGateway.get_instance()


def get_upload_handler(gateway: ObjectStoreGateway = Depends(get_object_store_gateway)) -> UploadHandler:
    return UploadHandler(gateway)
