from __future__ import annotations

from urllib.parse import urlencode

from ...clients.aptos_view import view_request_body
from ...constants import AAVE_POOL_DATA_PROVIDER
from ...settings import EngineSettings
from .base import (
    CustomTransform,
    DefaultEnvelope,
    SourceConfig,
    SourceTransform,
    fetch_source,
    pool_from_mapping,
)
from .transforms import (
    aave_transform,
    amnis_transform,
    echelon_transform,
    hyperion_transform,
    kofi_transform,
    tapp_request_body,
    tapp_transform,
)


def _with_query(url: str, **params: str) -> str:
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode(params)}"


def default_sources(config: EngineSettings) -> list[SourceConfig]:
    """Shipped pool sources in declaration order.

    Sources named in ``config.disabled_sources`` (case-insensitive) start
    disabled.
    """
    disabled = {name.casefold() for name in config.disabled_sources}
    sources = [
        SourceConfig(
            name="Joule",
            url=_with_query(config.yield_markets_url, protocol="Joule"),
        ),
        SourceConfig(
            name="Aave",
            url=config.aptos_view_url,
            method="POST",
            body=view_request_body(
                f"{AAVE_POOL_DATA_PROVIDER}::ui_pool_data_provider_v3::get_reserves_data"
            ),
            headers=config.aptos_auth_headers,
            transform=CustomTransform(aave_transform),
        ),
        SourceConfig(
            name="Hyperion",
            url=config.hyperion_pools_url,
            transform=CustomTransform(hyperion_transform),
        ),
        SourceConfig(
            name="Tapp Exchange",
            url=config.tapp_api_url,
            method="POST",
            body=tapp_request_body(page_size=config.tapp_page_size),
            transform=CustomTransform(tapp_transform),
        ),
        SourceConfig(
            name="Amnis Finance",
            url=config.amnis_stake_info_url,
            transform=CustomTransform(amnis_transform),
        ),
        SourceConfig(
            name="KoFi Finance",
            url=config.echelon_markets_url,
            transform=CustomTransform(kofi_transform),
        ),
        SourceConfig(
            name="Echelon",
            url=config.echelon_markets_url,
            transform=CustomTransform(echelon_transform),
        ),
    ]
    return [
        source.with_enabled(source.name.casefold() not in disabled)
        for source in sources
    ]


__all__ = [
    "CustomTransform",
    "DefaultEnvelope",
    "SourceConfig",
    "SourceTransform",
    "default_sources",
    "fetch_source",
    "pool_from_mapping",
]
