"""
Filtering module for property feed listings.

This module provides functionality to narrow feed listings by a classified
search query and by location, room type and price range selectors.
"""

from .listing_filter import ListingFilter

__all__ = ['ListingFilter']
