# sound.py
# Fire-and-forget sound notifications

from __future__ import annotations

import logging
from typing import List, Protocol

logger = logging.getLogger(__name__)


class SoundSink(Protocol):
    def play(self, event: str) -> None: ...


class LoggingSound:
    """Default sink: no audio, the event is only logged."""

    def play(self, event: str) -> None:
        logger.debug("sound: %s", event)


class RecordingSound:
    """Keeps every event in order. Used by the front end's status line and by tests."""

    def __init__(self):
        self.events: List[str] = []

    def play(self, event: str) -> None:
        self.events.append(event)
