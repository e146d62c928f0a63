"""Music catalog access: bearer tokens and preview lookup."""

from src.catalog.lookup import CatalogLookup, build_query
from src.catalog.token_provider import CatalogToken, CatalogTokenProvider

__all__ = ["CatalogLookup", "CatalogToken", "CatalogTokenProvider", "build_query"]
