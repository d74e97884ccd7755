"""Locale fallback chain construction."""

from __future__ import annotations

from folio.config import SiteConfig


def locale_chain(site: SiteConfig, preferred: str | None = None) -> list[str | None]:
    """Ordered, de-duplicated locales to try when resolving content.

    Order: the preferred locale (only if enabled), the default locale, the
    remaining enabled locales in config order, and finally ``None`` for the
    legacy locale-less path.
    """
    enabled = [locale.code for locale in site.enabled_locales]
    chain: list[str | None] = []

    def add(code: str | None) -> None:
        if code and code not in chain:
            chain.append(code)

    if preferred in enabled:
        add(preferred)
    add(site.default_locale)
    for code in enabled:
        add(code)
    chain.append(None)
    return chain
