"""Match configuration app items against the local app catalog.

Display names are localized and change between versions, so matching goes
by package identity first and by ``Id`` only for items with no identity.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .models import AppItem
from .schema import ConfigurationItem


def _same(a: str | None, b: str | None) -> bool:
    return bool(a) and bool(b) and a.casefold() == b.casefold()


def find_matching_app(item: ConfigurationItem, apps: Sequence[AppItem]) -> AppItem | None:
    if item.appx_package_name:
        return next((a for a in apps if _same(a.appx_package_name, item.appx_package_name)), None)
    if item.capability_name:
        return next((a for a in apps if _same(a.capability_name, item.capability_name)), None)
    if item.optional_feature_name:
        return next(
            (a for a in apps if _same(a.optional_feature_name, item.optional_feature_name)), None
        )
    if item.winget_package_id:
        return next(
            (a for a in apps if any(_same(p, item.winget_package_id) for p in a.winget_package_id)),
            None,
        )
    if item.id:
        return next((a for a in apps if a.id == item.id), None)
    return None


def match_apps(items: Iterable[ConfigurationItem], apps: Sequence[AppItem]) -> list[AppItem]:
    """Matched apps in item order, without duplicates."""
    matched: list[AppItem] = []
    seen: set[str] = set()
    for item in items:
        app = find_matching_app(item, apps)
        if app is not None and app.id not in seen:
            seen.add(app.id)
            matched.append(app)
    return matched
