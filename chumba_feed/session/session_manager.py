"""
Session persistence for the Chumba Connect feed client.

This module keeps the bearer token and the recent search list across runs,
standing in for the device storage the mobile client reads them from.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional
from datetime import datetime


logger = logging.getLogger(__name__)

MAX_RECENT_SEARCHES = 5


class FeedSessionManager:
    """Manages session persistence for the feed client.

    Handles loading and saving session state to file-based storage with
    graceful error handling for storage failures. When storage fails the
    session continues in memory.

    Attributes:
        session_id: Unique identifier for this session
        base_dir: Base directory for file-based storage
    """

    def __init__(
        self,
        session_id: str = "chumba_feed",
        base_dir: str = "./feed_sessions"
    ):
        """Initialize session manager.

        Args:
            session_id: Unique identifier for this session
            base_dir: Base directory for file-based storage
        """
        self.session_id = session_id
        self.base_dir = Path(base_dir)
        self._state: Optional[Dict[str, Any]] = None

    def _get_session_file_path(self) -> Path:
        return self.base_dir / f"{self.session_id}.json"

    @property
    def state(self) -> Dict[str, Any]:
        """Session state, loaded from storage on first access."""
        if self._state is None:
            self._state = self.load_session()
        return self._state

    def load_session(self) -> Dict[str, Any]:
        """Load previous session state from persistent storage.

        If loading fails, logs the error and returns an empty session state
        for in-memory operation.

        Returns:
            Dictionary containing session state with keys:
                - session_id: Session identifier
                - token: Bearer token, or None when logged out
                - last_run: ISO format timestamp of last save
                - recent_searches: Most recent search queries, newest first
        """
        session_file = self._get_session_file_path()

        if not session_file.exists():
            logger.info(f"No existing session found at {session_file}")
            return self._create_empty_session()

        try:
            with open(session_file, 'r') as f:
                session_data = json.load(f)
            logger.info(f"Successfully loaded session from {session_file}")
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse session JSON from {session_file}: {e}")
            return self._create_empty_session()
        except OSError as e:
            logger.error(f"Failed to read session file {session_file}: {e}")
            return self._create_empty_session()

        if not isinstance(session_data, dict):
            logger.error(f"Session file {session_file} does not hold an object")
            return self._create_empty_session()

        return {**self._create_empty_session(), **session_data}

    def save_session(self) -> bool:
        """Save current session state to persistent storage.

        Returns:
            True if save was successful, False otherwise
        """
        session_file = self._get_session_file_path()
        state = self.state
        state["last_run"] = datetime.now().isoformat()

        try:
            session_file.parent.mkdir(parents=True, exist_ok=True)
            with open(session_file, 'w') as f:
                json.dump(state, f, indent=2)

            logger.debug(f"Saved session to {session_file}")
            return True
        except OSError as e:
            logger.error(f"Failed to write session file {session_file}: {e}")
            return False
        except TypeError as e:
            logger.error(f"Failed to serialize session state to JSON: {e}")
            return False

    def _create_empty_session(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "token": None,
            "last_run": None,
            "recent_searches": [],
        }

    def get_token(self) -> Optional[str]:
        token = self.state.get("token")
        return token if isinstance(token, str) and token else None

    def set_token(self, token: str) -> bool:
        self.state["token"] = token
        return self.save_session()

    def clear_token(self) -> bool:
        """Forget the bearer token after the server rejected it."""
        self.state["token"] = None
        logger.info("Cleared stored session token")
        return self.save_session()

    def recent_searches(self) -> List[str]:
        searches = self.state.get("recent_searches") or []
        return [s for s in searches if isinstance(s, str)]

    def add_recent_search(self, query: str) -> List[str]:
        """Record a search at the front of the recent list.

        An earlier entry for the same query is moved rather than duplicated,
        and the list keeps at most five entries.

        Args:
            query: Search text to record

        Returns:
            Updated recent search list, newest first
        """
        query = query.strip()
        if not query:
            return self.recent_searches()

        updated = [query] + [
            item for item in self.recent_searches() if item != query
        ][:MAX_RECENT_SEARCHES - 1]

        self.state["recent_searches"] = updated
        self.save_session()
        return updated
