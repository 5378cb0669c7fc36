"""Read-only catalog sources feeding card sync."""

from vocab_srs.integration.catalog import (
    CatalogSource,
    JsonCatalogSource,
    StaticCatalogSource,
    parse_catalog,
)

__all__ = [
    "CatalogSource",
    "JsonCatalogSource",
    "StaticCatalogSource",
    "parse_catalog",
]
