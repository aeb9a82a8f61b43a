"""Region resolution for watch providers."""

from __future__ import annotations

from typing import Any

from moviestudio.domain.entities.movie import WatchProvider, WatchProviderSet


def _providers(rows: Any) -> tuple[WatchProvider, ...]:
    if not isinstance(rows, list):
        return ()
    parsed = [WatchProvider.from_api(r) for r in rows if isinstance(r, dict)]
    providers = [p for p in parsed if p is not None]
    # Providers without a priority sort last, stable otherwise.
    providers.sort(
        key=lambda p: (p.display_priority is None, p.display_priority or 0)
    )
    return tuple(providers)


def resolve_watch_providers(
    bundles: dict[str, Any],
    region: str,
    *,
    fallback_to_first: bool = True,
) -> WatchProviderSet:
    """Pick the provider bundle for *region*.

    Falls back to the first bundle in API order when the region is absent
    (and ``fallback_to_first`` is set). No bundles at all yields an empty set
    without a link.
    """
    if not bundles:
        return WatchProviderSet()

    key = region.upper()
    bundle = bundles.get(key)
    if bundle is None and fallback_to_first:
        key, bundle = next(iter(bundles.items()))
    if not isinstance(bundle, dict):
        return WatchProviderSet()

    link = bundle.get("link")
    return WatchProviderSet(
        stream=_providers(bundle.get("flatrate")),
        rent=_providers(bundle.get("rent")),
        buy=_providers(bundle.get("buy")),
        link=link if isinstance(link, str) and link else None,
        region=key,
    )
