"""Translation namespaces and the keys every default-locale file must define."""

from typing import Dict, Tuple

NAMESPACES: Dict[str, Tuple[str, ...]] = {
    "common": (
        "siteName",
        "nav.home",
        "nav.about",
        "nav.register",
        "footer.copyright",
        "localeSwitcher.label",
    ),
    "home": (
        "pageTitle",
        "hero.title",
        "hero.subtitle",
        "hero.callToAction",
    ),
    "register": (
        "pageTitle",
        "form.teamName",
        "form.contactEmail",
        "form.submit",
        "upload.label",
        "upload.failed",
        "upload.linkExpired",
    ),
}
