from textwrap import dedent
import logging
from typing import Optional

import pydantic
from fastapi import FastAPI
from fastapi.routing import APIRoute
from fastapi.middleware.cors import CORSMiddleware

from ibcol_api.adapters.storage import StorageBackend
from ibcol_api.config.settings import Settings, get_settings
from ibcol_api.errors import (
    handle_broad_exceptions,
    handle_invalid_reference,
    handle_not_found,
    handle_pydantic_validation_errors,
    handle_storage_errors,
    handle_upload_rejected,
)
from ibcol_api.exceptions import InvalidReference, NotFound, StorageError, UploadRejected
from ibcol_api.file_refs.service import FileReferenceService
from ibcol_api.i18n.catalog import TranslationCatalog
from ibcol_api.routers.files import router as files_router
from ibcol_api.routers.health import router as health_router
from ibcol_api.routers.locales import router as locales_router

# Set up logging
logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_translations(settings: Settings) -> TranslationCatalog:
    """Load and validate translations; incomplete default-locale data stops startup."""
    catalog = TranslationCatalog.load(
        settings.translations_dir,
        settings.supported_locales,
        settings.default_locale,
    )
    catalog.validate()
    return catalog


def create_app(settings: Optional[Settings] = None, storage: Optional[StorageBackend] = None) -> FastAPI:
    """Create a FastAPI application.

    Raises ConfigurationError if the settings or default-locale translations are invalid.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="IBCOL Portal API",
        summary="Registration uploads and translations for the IBCOL website",
        version="v1",
        description=dedent(
            """\
        Upload files straight to storage with signed URLs and reference them
        through opaque `fileRef` tokens.

        | Endpoint | Notes |
        | --- | --- |
        | `POST /files` | Get an upload URL and a `fileRef` |
        | `GET /files/{fileRef}` | Redirects to a short-lived download URL |
        | `GET /i18n/{locale}/{namespace}` | Translation bundle with default-locale fallback |
        """
        ),
        docs_url="/docs",
        generate_unique_id_function=custom_generate_unique_id,
    )

    # Browser clients upload and download from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.file_references = FileReferenceService.from_settings(settings, storage=storage)
    app.state.translations = load_translations(settings)
    logger.info(
        f"{settings.app_name} ready in {settings.deployment_mode} mode "
        f"(bucket={settings.s3_bucket_name}, locales={settings.supported_locales})"
    )

    app.include_router(files_router, tags=["files"])
    app.include_router(locales_router, tags=["i18n"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(InvalidReference, handle_invalid_reference)
    app.add_exception_handler(NotFound, handle_not_found)
    app.add_exception_handler(UploadRejected, handle_upload_rejected)
    app.add_exception_handler(StorageError, handle_storage_errors)
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)
