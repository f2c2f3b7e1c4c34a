from __future__ import annotations

from listing_hub.core.config import settings


def country_code_for(value: str | None) -> str | None:
    """
    Resolve a client-supplied country (ISO alpha-2 or a known country name) to
    an upper-case alpha-2 code. Returns None when nothing usable was given.
    """
    if value is None:
        return None
    v = str(value).strip()
    if not v:
        return None
    if len(v) == 2 and v.isalpha():
        return v.upper()
    return settings.country_names.get(v.lower())


def route_site(country_code: str | None) -> str:
    # Pure and total: unknown/missing codes fall back to the default site.
    code = country_code_for(country_code)
    if code is None:
        return settings.default_site
    return settings.country_sites.get(code, settings.default_site).lower()
