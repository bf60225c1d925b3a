"""FastAPI dependencies exposing the components built in ``create_app``."""

from fastapi import Request

from ibcol_api.config.settings import Settings
from ibcol_api.file_refs.service import FileReferenceService
from ibcol_api.i18n.catalog import TranslationCatalog


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_file_reference_service(request: Request) -> FileReferenceService:
    return request.app.state.file_references


def get_translation_catalog(request: Request) -> TranslationCatalog:
    return request.app.state.translations
