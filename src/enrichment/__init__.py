"""Product link enrichment package."""

from src.enrichment.links import (
    DEFAULT_STORE_LABEL,
    RETAILER_SEARCH_TEMPLATES,
    RetailerTemplate,
    build_links,
    enrich_product,
    enrich_products,
)

__all__ = [
    "DEFAULT_STORE_LABEL",
    "RETAILER_SEARCH_TEMPLATES",
    "RetailerTemplate",
    "build_links",
    "enrich_product",
    "enrich_products",
]
