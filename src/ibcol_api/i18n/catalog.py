"""Translation catalog loaded from ``<directory>/<locale>/<namespace>.json``.

Lookups fall back from the requested locale to the default locale and then
to the raw key, so a missing translation shows up on the page instead of
breaking it. Completeness of the default locale is checked once, at
startup, by ``validate``.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ibcol_api.exceptions import ConfigurationError
from ibcol_api.i18n.locales import resolve_locale
from ibcol_api.i18n.namespaces import NAMESPACES
from ibcol_api.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)

Tree = Dict[str, Any]


def lookup(tree: Optional[Mapping[str, Any]], key: str) -> Optional[str]:
    """Follow a dotted ``key`` through ``tree``. Only string leaves count as found."""
    node: Any = tree
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node if isinstance(node, str) else None


def _deep_merge(base: Tree, overrides: Mapping[str, Any]) -> Tree:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _flatten_keys(tree: Mapping[str, Any], prefix: str = "") -> List[str]:
    keys = []
    for key, value in tree.items():
        path = f"{prefix}{key}"
        if isinstance(value, Mapping):
            keys.extend(_flatten_keys(value, f"{path}."))
        elif isinstance(value, str):
            keys.append(path)
    return keys


class TranslationCatalog:
    """In-memory string trees keyed by ``(locale, namespace)``."""

    def __init__(
        self,
        trees: Mapping[Tuple[str, str], Tree],
        supported_locales: Sequence[str],
        default_locale: str,
        namespaces: Mapping[str, Sequence[str]] = NAMESPACES,
    ):
        self._trees = dict(trees)
        self.supported_locales = list(supported_locales)
        self.default_locale = default_locale
        self.namespaces = dict(namespaces)

    @classmethod
    @log_execution_time
    def load(
        cls,
        directory: Path,
        supported_locales: Sequence[str],
        default_locale: str,
        namespaces: Mapping[str, Sequence[str]] = NAMESPACES,
    ) -> "TranslationCatalog":
        """Read every translation file that exists for the supported locales.

        Missing files are not an error here; ``validate`` decides which
        absences matter. Unreadable or non-object JSON is.
        """
        trees: Dict[Tuple[str, str], Tree] = {}
        for locale in supported_locales:
            for namespace in namespaces:
                path = Path(directory) / locale / f"{namespace}.json"
                if not path.is_file():
                    logger.debug(f"No {namespace} translations for {locale}")
                    continue
                try:
                    with path.open("r", encoding="utf-8") as f:
                        tree = json.load(f)
                except (OSError, json.JSONDecodeError) as err:
                    raise ConfigurationError(f"Cannot read translation file {path}: {err}") from err
                if not isinstance(tree, dict):
                    raise ConfigurationError(f"Translation file {path} must contain a JSON object")
                trees[(locale, namespace)] = tree

        logger.info(f"Loaded {len(trees)} translation files from {directory}")
        return cls(trees, supported_locales, default_locale, namespaces)

    def validate(self) -> None:
        """Check the default locale defines every mandatory key of every namespace.

        Raises:
            ConfigurationError: listing every missing file and key.
        """
        problems = []
        for namespace, mandatory_keys in self.namespaces.items():
            tree = self._trees.get((self.default_locale, namespace))
            if tree is None:
                problems.append(f"missing {self.default_locale}/{namespace}.json")
                continue
            for key in mandatory_keys:
                if lookup(tree, key) is None:
                    problems.append(f"{self.default_locale}/{namespace}.json has no string at {key!r}")

        if problems:
            raise ConfigurationError("Incomplete default-locale translations: " + "; ".join(problems))

    def has_namespace(self, namespace: str) -> bool:
        return namespace in self.namespaces

    def translate(self, key: str, namespace: str, locale: Optional[str]) -> str:
        """Best available string for ``key``: requested locale, then default locale, then ``key``."""
        locale = resolve_locale(locale, self.supported_locales, self.default_locale)

        value = lookup(self._trees.get((locale, namespace)), key)
        if value is None and locale != self.default_locale:
            value = lookup(self._trees.get((self.default_locale, namespace)), key)
        if value is None:
            logger.debug(f"Missing translation {namespace}:{key} for {locale}")
            return key
        return value

    def namespace_tree(self, namespace: str, locale: Optional[str]) -> Tree:
        """Default-locale tree for ``namespace`` overlaid with the locale's own strings."""
        locale = resolve_locale(locale, self.supported_locales, self.default_locale)
        base = self._trees.get((self.default_locale, namespace), {})
        if locale == self.default_locale:
            return copy.deepcopy(base)
        return _deep_merge(base, self._trees.get((locale, namespace), {}))

    def missing_keys(self, locale: str) -> Dict[str, List[str]]:
        """Keys the default locale defines that ``locale`` lacks, per namespace."""
        missing = {}
        for namespace in self.namespaces:
            default_tree = self._trees.get((self.default_locale, namespace), {})
            tree = self._trees.get((locale, namespace))
            absent = [key for key in _flatten_keys(default_tree) if lookup(tree, key) is None]
            if absent:
                missing[namespace] = absent
        return missing
