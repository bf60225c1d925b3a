from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Path, status
from fastapi.responses import RedirectResponse

from ibcol_api.dependencies import get_translation_catalog
from ibcol_api.i18n.catalog import TranslationCatalog
from ibcol_api.i18n.locales import negotiate_locale, resolve_locale
from ibcol_api.schemas import TranslationBundleResponse

router = APIRouter()


@router.get("/", response_class=RedirectResponse, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
async def redirect_to_locale(
    accept_language: Optional[str] = Header(None),
    catalog: TranslationCatalog = Depends(get_translation_catalog),
):
    """
    Send visitors without a locale in the path to their best supported locale.

    `Accept-Language` is only consulted here; locale-prefixed paths are never
    overridden by it. This API serves no `/{locale}` page itself: the site's
    page renderer sits in front of it and owns every locale-prefixed path,
    fetching its strings from `/i18n/{locale}/{namespace}`.
    """
    locale = negotiate_locale(accept_language, catalog.supported_locales, catalog.default_locale)
    return RedirectResponse(
        url=f"/{locale}",
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        headers={"Vary": "Accept-Language"},
    )


@router.get("/i18n/{locale}/{namespace}", response_model=TranslationBundleResponse)
async def get_translation_bundle(
    locale: str = Path(..., description="Requested locale, e.g. `zh-hk`"),
    namespace: str = Path(..., description="Translation namespace, e.g. `home`"),
    catalog: TranslationCatalog = Depends(get_translation_catalog),
) -> TranslationBundleResponse:
    """
    Return every string of a namespace for a locale.

    Unsupported locales are served the default locale, and strings the
    locale lacks are filled in from the default locale.
    """
    if not catalog.has_namespace(namespace):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown translation namespace '{namespace}'"
        )

    served = resolve_locale(locale, catalog.supported_locales, catalog.default_locale)
    tree = catalog.namespace_tree(namespace, served)
    return TranslationBundleResponse(locale=served, namespace=namespace, strings=tree)
