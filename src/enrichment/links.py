"""
Retailer Link Enrichment

Every recommended product gets the same fixed set of search links, so the
user can compare prices even when the model's direct URL is stale.

DESIGN DECISION: The retailer table is static configuration, not something
the model can influence. Given the same product, enrichment always returns
the same links in the same order.
"""

from collections.abc import Sequence
from typing import NamedTuple
from urllib.parse import quote

from src.models.insights import EnrichedProduct, ProductCandidate, RetailerLink


class RetailerTemplate(NamedTuple):
    label: str
    url_template: str  # "{query}" is replaced with the encoded search query
    accent_color: str


RETAILER_SEARCH_TEMPLATES: tuple[RetailerTemplate, ...] = (
    RetailerTemplate("Amazon", "https://www.amazon.com/s?k={query}", "#FF9900"),
    RetailerTemplate("Google", "https://www.google.com/search?tbm=shop&q={query}", "#4285F4"),
    RetailerTemplate("Best Buy", "https://www.bestbuy.com/site/searchpage.jsp?st={query}", "#0046BE"),
    RetailerTemplate("Walmart", "https://www.walmart.com/search?q={query}", "#0071DC"),
    RetailerTemplate("eBay", "https://www.ebay.com/sch/i.html?_nkw={query}", "#E53238"),
)

DEFAULT_STORE_LABEL = "Store"
PRIMARY_ACCENT_COLOR = "#FF9900"


def search_query_for(candidate: ProductCandidate) -> str:
    return candidate.search_query.strip() or candidate.name


def build_links(
    candidate: ProductCandidate,
    templates: Sequence[RetailerTemplate] = RETAILER_SEARCH_TEMPLATES,
) -> list[RetailerLink]:
    """
    Links for one product: the direct product page first (if known),
    then one search link per retailer template.
    """
    links = []

    if candidate.direct_url:
        links.append(RetailerLink(
            label=candidate.source_retailer or DEFAULT_STORE_LABEL,
            url=candidate.direct_url,
            accent_color=PRIMARY_ACCENT_COLOR,
            is_primary=True,
        ))

    encoded = quote(search_query_for(candidate), safe="")
    for template in templates:
        links.append(RetailerLink(
            label=template.label,
            url=template.url_template.format(query=encoded),
            accent_color=template.accent_color,
            is_primary=False,
        ))

    return links


def enrich_product(
    candidate: ProductCandidate,
    templates: Sequence[RetailerTemplate] = RETAILER_SEARCH_TEMPLATES,
) -> EnrichedProduct:
    """Copy of the candidate with its links attached; the candidate is untouched."""
    return EnrichedProduct(
        **candidate.model_dump(),
        links=build_links(candidate, templates),
    )


def enrich_products(
    candidates: Sequence[ProductCandidate],
    templates: Sequence[RetailerTemplate] = RETAILER_SEARCH_TEMPLATES,
) -> list[EnrichedProduct]:
    return [enrich_product(candidate, templates) for candidate in candidates]
