"""WooCommerce product catalog search.

The catalog is an optional capability. When it is not configured, or the
call fails, search returns None ("unavailable") and callers degrade to a
fixed context text instead of failing the message.
"""

from __future__ import annotations

import html
import logging
import re
from typing import Any

import httpx

from orderbot.config import CatalogConfig
from orderbot.models import ProductRecord, StockStatus

logger = logging.getLogger(__name__)

MAX_RESULTS = 5
DESCRIPTION_BUDGET = 200
PRICE_ON_REQUEST = "Prix sur demande"

CATALOG_UNAVAILABLE_CONTEXT = (
    "Le catalogue produits n'est pas disponible pour le moment. "
    "Aucune information produit ne peut être confirmée."
)
NO_MATCH_CONTEXT = "Aucun produit correspondant n'a été trouvé dans le catalogue."

_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


class CatalogSearchClient:
    """Searches published products. One attempt, bounded timeout."""

    def __init__(self, config: CatalogConfig, timeout: float = 10.0) -> None:
        self._config = config
        self._timeout = timeout

    async def search(self, query: str) -> list[ProductRecord] | None:
        """Search the catalog.

        Returns:
            Up to MAX_RESULTS products, or None when the catalog is not
            configured or the call failed.
        """
        if not self._config.is_configured:
            return None

        url = f"{self._config.base_url.rstrip('/')}/wp-json/wc/v3/products"
        params = {"search": query, "per_page": MAX_RESULTS, "status": "publish"}
        auth = (self._config.consumer_key, self._config.consumer_secret)

        try:
            async with httpx.AsyncClient() as client:
                resp = await client.get(
                    url, params=params, auth=auth, timeout=self._timeout,
                )
        except httpx.HTTPError as exc:
            logger.warning("Catalog search failed for %r: %s", query, exc)
            return None

        if resp.status_code >= 400:
            logger.warning("Catalog search returned HTTP %s for %r", resp.status_code, query)
            return None

        try:
            items = resp.json()
        except ValueError:
            logger.warning("Catalog search returned a non-JSON body for %r", query)
            return None

        if not isinstance(items, list):
            logger.warning("Catalog search returned %s instead of a list", type(items).__name__)
            return None

        return [to_product(item) for item in items[:MAX_RESULTS] if isinstance(item, dict)]


def to_product(item: dict[str, Any]) -> ProductRecord:
    """Map a WooCommerce product object onto a ProductRecord."""
    price = _text(item.get("price")) or _text(item.get("regular_price")) or PRICE_ON_REQUEST
    description = _text(item.get("short_description")) or _text(item.get("description"))
    stock = (
        StockStatus.IN_STOCK
        if item.get("stock_status") == "instock"
        else StockStatus.OUT_OF_STOCK
    )
    return ProductRecord(
        name=_text(item.get("name")),
        price=price,
        sale_price=_text(item.get("sale_price")) or None,
        short_description=clean_description(description),
        stock_status=stock,
        sku=_text(item.get("sku")) or None,
        permalink=_text(item.get("permalink")),
    )


def clean_description(raw: str, budget: int = DESCRIPTION_BUDGET) -> str:
    """Strip markup and truncate to the character budget."""
    text = html.unescape(_TAG.sub(" ", raw))
    text = _WHITESPACE.sub(" ", text).strip()
    if len(text) > budget:
        return text[:budget].rstrip() + "..."
    return text


def build_catalog_context(products: list[ProductRecord] | None) -> str:
    """Render search results as prompt context text."""
    if products is None:
        return CATALOG_UNAVAILABLE_CONTEXT
    if not products:
        return NO_MATCH_CONTEXT

    blocks: list[str] = []
    for index, product in enumerate(products, start=1):
        lines = [f"{index}. {product.name}", f"   Prix : {product.price}"]
        if product.sale_price:
            lines.append(f"   Prix promotionnel : {product.sale_price}")
        stock = "En stock" if product.stock_status == StockStatus.IN_STOCK else "Rupture de stock"
        lines.append(f"   Disponibilité : {stock}")
        if product.sku:
            lines.append(f"   Référence : {product.sku}")
        if product.short_description:
            lines.append(f"   Description : {product.short_description}")
        if product.permalink:
            lines.append(f"   Lien : {product.permalink}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
