from crewapp.services.cache.catalog_cache import CacheEntry, CatalogCache, FillResult

__all__ = ["CacheEntry", "CatalogCache", "FillResult"]
