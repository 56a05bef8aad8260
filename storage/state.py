"""Generation-tagged holder for the current portfolio snapshot.

Exactly one snapshot is current at a time. Every lookup starts a new
generation; writes tagged with an older generation are dropped, so responses
for an abandoned address never leak into the slot after a reset or a new
lookup. Each endpoint writes only its own field, and listeners are told which
field changed so they can refresh just the dependent panels.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from storage.models import PortfolioSnapshot

logger = logging.getLogger(__name__)

STARTED = "started"
UPDATED = "updated"
COMPLETED = "completed"
FAILED = "failed"
RESET = "reset"


@dataclass(frozen=True)
class SnapshotEvent:
    kind: str
    generation: int
    snapshot: Optional[PortfolioSnapshot] = None
    field: Optional[str] = None
    message: Optional[str] = None


Listener = Callable[[SnapshotEvent], None]


class SnapshotStore:
    """Single mutable slot plus a listener list."""

    def __init__(self):
        self.generation = 0
        self.current: Optional[PortfolioSnapshot] = None
        self._listeners: List[Listener] = []

    # ── Subscriptions ──

    def subscribe(self, listener: Listener) -> Listener:
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: SnapshotEvent):
        for listener in list(self._listeners):
            listener(event)

    # ── Lifecycle ──

    def is_current(self, generation: int) -> bool:
        return generation == self.generation and self.current is not None

    def begin(self, address: str) -> int:
        """Start a new lookup, replacing the slot wholesale."""
        self.generation += 1
        self.current = PortfolioSnapshot(address=address, generation=self.generation)
        self._emit(SnapshotEvent(STARTED, self.generation, self.current))
        return self.generation

    def apply(self, generation: int, name: str, value) -> bool:
        """Write one field for ``generation``. Returns False if stale."""
        if not self.is_current(generation):
            logger.debug("Dropping stale %s update (generation %d, current %d)",
                         name, generation, self.generation)
            return False
        self.current = self.current.with_field(name, value)
        self._emit(SnapshotEvent(UPDATED, generation, self.current, field=name))
        return True

    def complete(self, generation: int) -> bool:
        if not self.is_current(generation):
            return False
        self._emit(SnapshotEvent(COMPLETED, generation, self.current))
        return True

    def fail(self, generation: int, message: str) -> bool:
        """Drop the partial snapshot and announce a total failure once."""
        if not self.is_current(generation):
            return False
        self.current = None
        self._emit(SnapshotEvent(FAILED, generation, message=message))
        return True

    def reset(self):
        """Return to the empty entry state; in-flight writes become stale."""
        self.generation += 1
        self.current = None
        self._emit(SnapshotEvent(RESET, self.generation))
