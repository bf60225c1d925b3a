from fastapi import APIRouter, Depends

from ibcol_api.config.settings import Settings
from ibcol_api.dependencies import get_app_settings
from ibcol_api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """
    Health check endpoint for monitoring API status.

    The app only starts once its configuration and default-locale translations
    are valid, so reaching this handler means the service is ready.
    """
    return HealthResponse(
        status="ok",
        deployment_mode=settings.deployment_mode,
        bucket=settings.s3_bucket_name,
        default_locale=settings.default_locale,
        supported_locales=settings.supported_locales,
    )
