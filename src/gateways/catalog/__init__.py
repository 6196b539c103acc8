from .client import CatalogClient as CatalogClient
