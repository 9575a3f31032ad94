"""Session persistence for the feed client."""

from .session_manager import FeedSessionManager, MAX_RECENT_SEARCHES

__all__ = ['FeedSessionManager', 'MAX_RECENT_SEARCHES']
