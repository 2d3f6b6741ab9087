"""Exercise catalog client and response models."""

from .client import CatalogClient
from .models import CatalogItem, CatalogSearchResponse

__all__ = ["CatalogClient", "CatalogItem", "CatalogSearchResponse"]
