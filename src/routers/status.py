import structlog
from fastapi import APIRouter, HTTPException

from src.models.status_report import StatusReport
from src.services import status_service

router = APIRouter()
logger = structlog.get_logger()


@router.get("/status", response_model=StatusReport)
async def status() -> StatusReport:
    """
    Runs every status check, currently whether the upload bucket is configured and reachable.

    Always 200 OK with the JSON status report, see /health for a pass/fail answer.
    """
    return await status_service.get_status()


@router.get("/health")
async def health():
    """
    * 200 OK with JSON {'Health': 'OK'} if all status checks pass
    * 503 SERVICE UNAVAILABLE with JSON {'detail': 'Please try again later.'} if any check fails
    """
    report = await status_service.get_status()
    if report.has_failures():
        logger.warning(f"Health check failed: {report.model_dump_json()}")
        raise HTTPException(status_code=503, detail="Please try again later.")
    return {'Health': 'OK'}
