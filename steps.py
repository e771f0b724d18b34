# steps.py
# Immutable animation steps and the recorder that captures them

from __future__ import annotations

import copy
import itertools
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

ACTIVE = "active"

Highlights = Union[Mapping[str, str], Iterable[str], None]


def freeze(value: Any) -> Any:
    """
    Returns a read-only copy of a plain state tree.
    dict -> read-only mapping, list/tuple -> tuple, set -> frozenset.
    Dataclass instances and other objects are deep-copied.
    """
    if isinstance(value, (str, int, float, bool, type(None))):
        return value
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(v) for v in value)
    return copy.deepcopy(value)


@dataclass(frozen=True)
class Step:
    state: Any
    highlights: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    pointers: Mapping[str, Optional[str]] = field(default_factory=lambda: MappingProxyType({}))
    message: str = ""
    aux: Any = None
    pause: float = 0.0

    def role_of(self, element_id: str) -> Optional[str]:
        return self.highlights.get(element_id)


def _normalize_highlights(highlights: Highlights) -> Dict[str, str]:
    if highlights is None:
        return {}
    if isinstance(highlights, Mapping):
        return {k: v for k, v in highlights.items() if k is not None}
    return {element_id: ACTIVE for element_id in highlights if element_id is not None}


class StepRecorder:
    def __init__(self):
        self.steps: List[Step] = []

    def record(
        self,
        state: Any,
        highlights: Highlights = None,
        pointers: Optional[Mapping[str, Optional[str]]] = None,
        message: str = "",
        aux: Any = None,
        pause: float = 0.0,
    ) -> Step:
        step = Step(
            state=freeze(state),
            highlights=freeze(_normalize_highlights(highlights)),
            pointers=freeze(dict(pointers or {})),
            message=message,
            aux=freeze(aux),
            pause=pause,
        )
        self.steps.append(step)
        logger.debug("step %d: %s", len(self.steps) - 1, message)
        return step

    @property
    def last(self) -> Optional[Step]:
        return self.steps[-1] if self.steps else None

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    def __getitem__(self, index: int) -> Step:
        return self.steps[index]


class IdSource:
    """Stable element ids: prefix + counter. Never reuses an id."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self.prefix}{next(self._counter)}"
