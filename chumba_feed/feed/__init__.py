"""
Feed module: listing store and pagination controller.
"""

from .feed_store import FeedStore
from .pagination_controller import FeedPaginationController

__all__ = ['FeedStore', 'FeedPaginationController']
