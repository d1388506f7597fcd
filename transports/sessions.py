"""
Session bookkeeping shared by both HTTP transports.
"""

import logging
import threading
from typing import Generic, TypeVar

from errors import UnknownSessionError

logger = logging.getLogger(__name__)

ChannelT = TypeVar("ChannelT")


class SessionStore(Generic[ChannelT]):
    """
    Maps session ids to open channels for one transport kind.

    A session is OPEN while its id is in the store and CLOSED once removed;
    a removed id is never looked up successfully again.
    """

    def __init__(self, kind: str):
        self.kind = kind
        self._channels: dict[str, ChannelT] = {}
        self._lock = threading.Lock()

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._channels

    def __len__(self) -> int:
        with self._lock:
            return len(self._channels)

    def create(self, session_id: str, channel: ChannelT) -> None:
        """Register a new channel under a fresh session id."""
        with self._lock:
            if session_id in self._channels:
                raise ValueError(f"{self.kind} session {session_id} already exists")
            self._channels[session_id] = channel
        logger.info("Opened %s session %s", self.kind, session_id)

    def get(self, session_id: str | None) -> ChannelT:
        """Look up an open channel, raising UnknownSessionError if there is none."""
        with self._lock:
            channel = self._channels.get(session_id) if session_id else None
        if channel is None:
            raise UnknownSessionError(session_id)
        return channel

    def remove(self, session_id: str) -> ChannelT | None:
        """Drop a session. Removing an unknown id is a no-op."""
        with self._lock:
            channel = self._channels.pop(session_id, None)
        if channel is not None:
            logger.info("Closed %s session %s", self.kind, session_id)
        return channel

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._channels)

    def clear(self) -> None:
        with self._lock:
            self._channels.clear()
