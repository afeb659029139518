import logging.config
import os
from contextlib import asynccontextmanager
from typing import Any

import sentry_sdk
import structlog
from asgi_correlation_id.context import correlation_id
from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from structlog.stdlib import LoggerFactory

from src.config import logging_config
from src.services.object_store_gateway import ObjectStoreGateway

from src.routers.root import router as root
from src.routers.status import router as status
from src.routers.upload import router as upload


def add_correlation(
        logger: logging.Logger, method_name: str, event_dict: dict[str, Any]) \
        -> dict[str, Any]:
    """processor function for structlog that adds correlation ID to log messages """
    if request_id := correlation_id.get():
        event_dict["request_id"] = request_id
    return event_dict


sentry_dsn = os.environ.get('SENTRY_DSN')

if sentry_dsn:
    sentry_sdk.init(
        dsn=sentry_dsn,

        integrations=[
            StarletteIntegration(
                transaction_style="endpoint",
                failed_request_status_codes=[range(500, 599)],
            ),
            FastApiIntegration(
                transaction_style="endpoint",
                failed_request_status_codes=[range(500, 599)],
            ),
        ]
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Build the gateway up front so missing storage configuration stops the service at startup
    gateway = ObjectStoreGateway.get_instance()
    structlog.get_logger().info(f"Uploads will be stored in bucket {gateway.bucket_name}")
    yield
    ObjectStoreGateway.clear_cache()


app = FastAPI(
    title='Batch Upload API',
    version='0.1.0',
    lifespan=lifespan
)

structlog.configure(
    logger_factory=LoggerFactory(), processors=[
        add_correlation,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M.%S"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=None,
    cache_logger_on_first_use=True
)

logging.config.dictConfig(logging_config.config)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(upload)

app.include_router(status)
app.include_router(root)
