"""
Scroll handling for the infinite property feed.

This module provides the ScrollMomentumGuard, which makes sure a single
scroll gesture triggers at most one load-more request.
"""

import logging


logger = logging.getLogger(__name__)


class ScrollMomentumGuard:
    """Allows one load-more trigger per scroll momentum.

    End-of-list events fire repeatedly while a fling decelerates. The guard
    is claimed by the first load-more of a gesture and released only when a
    new momentum scroll begins.
    """

    def __init__(self):
        self._claimed = False

    @property
    def claimed(self) -> bool:
        return self._claimed

    def begin_momentum(self) -> None:
        """Release the guard at the start of a new scroll gesture."""
        self._claimed = False

    def try_claim(self) -> bool:
        """Claim the guard for the current gesture.

        Returns:
            True if the guard was free and is now claimed, False if this
            gesture already triggered a load
        """
        if self._claimed:
            logger.debug("Load-more already triggered for this scroll gesture")
            return False
        self._claimed = True
        return True
