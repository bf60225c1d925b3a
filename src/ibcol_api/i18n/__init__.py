"""Locale resolution and translation lookup."""

from ibcol_api.i18n.catalog import TranslationCatalog
from ibcol_api.i18n.locales import negotiate_locale, normalise_locale, resolve_locale

__all__ = ["TranslationCatalog", "negotiate_locale", "normalise_locale", "resolve_locale"]
