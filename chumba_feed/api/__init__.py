"""Property API client for the Chumba Connect backend."""

from .property_client import PropertyApiClient, FEED_PATH, STORE_SEARCH_PATH

__all__ = ["PropertyApiClient", "FEED_PATH", "STORE_SEARCH_PATH"]
