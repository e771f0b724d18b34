# tutor.py
# Hooks an external tutor uses to point at values and to build structures

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from layout import HIGHLIGHTED
from operation import Engine, OperationResult
from settings import HIGHLIGHT_DURATION_MS

logger = logging.getLogger(__name__)


class TutorBridge:
    """
    The view registers one bridge per mounted engine. highlight_value marks
    every element holding a value with the transient highlighted role; the
    mark fades after HIGHLIGHT_DURATION_MS of update() time.
    """

    def __init__(self, engine: Engine, context: Optional[str] = None):
        self.engine = engine
        self.context = context or engine.context
        self.highlights: Dict[str, str] = {}
        self._remaining = 0.0

    def highlight_value(self, value) -> int:
        ids = self.engine.ids_with_value(value)
        if not ids:
            try:
                number = float(value)
            except (TypeError, ValueError):
                number = None
            if number is not None:
                ids = self.engine.ids_with_value(number)
        self.highlights = {element_id: HIGHLIGHTED for element_id in ids}
        self._remaining = HIGHLIGHT_DURATION_MS if ids else 0.0
        logger.debug("tutor highlight %r -> %s", value, ids)
        return len(ids)

    def build_from(self, values: Sequence) -> OperationResult:
        self.clear_highlight()
        return self.engine.build(values)

    def clear_highlight(self):
        self.highlights = {}
        self._remaining = 0.0

    @property
    def active(self) -> bool:
        return bool(self.highlights)

    def update(self, dt: float):
        if not self.highlights:
            return
        self._remaining -= dt
        if self._remaining <= 0:
            self.clear_highlight()
