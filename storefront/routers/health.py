"""Health checks and service status."""
from fastapi import APIRouter, Depends

from storefront.core.config import settings
from storefront.dependencies.rate_limit import public_rate_limit
from storefront.utils.helpers import format_response

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(_: None = Depends(public_rate_limit)):
    return format_response(status="ok", service=settings.APP_NAME, env=settings.ENV)
