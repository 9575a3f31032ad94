"""
Search input handling: validation, classification and debounced logging.
"""

from .query_validator import QueryValidator
from .query_classifier import QueryClassifier
from .search_logger import SearchLogDebouncer

__all__ = ['QueryValidator', 'QueryClassifier', 'SearchLogDebouncer']
