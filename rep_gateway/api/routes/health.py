"""
Health and privacy endpoints (no streaming, no provider calls)
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from rep_gateway.api.schemas.health import HealthResponse, PrivacyResponse
from rep_gateway.config.settings import settings


router = APIRouter(tags=["health"])

PRIVACY_NOTICE = """# Privacy Notice

## Data Collection
- We log IP addresses for security purposes
- Chat messages are processed by AI services but are not stored persistently
- No cookies or persistent tracking mechanisms are used
- No personal information is retained beyond temporary processing

## Data Processing
- Your messages are sent to a third-party AI service for processing
- Meeting scheduling requests result in providing a Calendly link for direct booking
- All data processing follows the principle of minimal data collection

## Data Retention
- Access logs are retained for up to 30 days for security purposes
- Chat conversations are not stored after processing
- Meeting scheduling is handled entirely through Calendly (no data stored by this service)

## Your Rights
- You can request deletion of any logged data by contacting us
"""


@router.get("/healthz", response_model=HealthResponse, response_model_by_alias=True)
async def health_check(request: Request):
    """Service status plus the checksum of every loaded content pack"""
    return HealthResponse(
        status="healthy",
        build_sha=settings.build_sha,
        pack_checksums=request.app.state.content_store.get_checksums(),
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/privacy", response_model=PrivacyResponse, response_model_by_alias=True)
async def privacy_notice():
    return PrivacyResponse(
        title="Privacy Notice",
        content=PRIVACY_NOTICE,
        last_updated=datetime.now(timezone.utc).strftime("%Y-%m-%d"),
    )
