"""Dashboard panels derived from the snapshot as it fills in.

Each panel names the snapshot fields it needs and a pure builder. When a
field lands only the panels that need it are rebuilt, and a panel whose
inputs are not all present yet simply stays empty.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from analyzers.allocation import allocation_by_position
from analyzers.metrics import compute_metrics
from analyzers.tables import active_position_rows, closed_position_rows
from analyzers.timeline import build_timeline
from analyzers.volume import daily_volume
from analyzers.winners_losers import winners_and_losers
from storage.models import (
    ACTIVITY, CLOSED_POSITIONS, LEADERBOARD, POSITIONS, QUICK_VALUE, TRADES,
    PortfolioSnapshot,
)
from storage.state import FAILED, RESET, STARTED, UPDATED, SnapshotEvent


@dataclass(frozen=True)
class Panel:
    name: str
    requires: Tuple[str, ...]
    build: Callable[[PortfolioSnapshot], Any]
    refresh_on: Tuple[str, ...] = ()  # optional inputs: rebuild on arrival, never waited for


PANELS = (
    Panel("metrics", (POSITIONS, CLOSED_POSITIONS, LEADERBOARD), compute_metrics,
          refresh_on=(QUICK_VALUE,)),
    Panel("allocation", (POSITIONS,), lambda s: allocation_by_position(s.positions)),
    Panel("winners_losers", (POSITIONS, CLOSED_POSITIONS),
          lambda s: winners_and_losers(s.positions, s.closed_positions)),
    Panel("volume", (TRADES,), lambda s: daily_volume(s.trades)),
    Panel("timeline", (ACTIVITY,), lambda s: build_timeline(s.activity)),
    Panel("active_table", (POSITIONS,), lambda s: active_position_rows(s.positions)),
    Panel("closed_table", (CLOSED_POSITIONS,),
          lambda s: closed_position_rows(s.closed_positions)),
)
PANELS_BY_NAME = {p.name: p for p in PANELS}


def panels_for_field(field: str) -> List[str]:
    return [p.name for p in PANELS if field in p.requires or field in p.refresh_on]


def build_panel(name: str, snapshot: Optional[PortfolioSnapshot]) -> Any:
    """The panel's content, or None while any required field is pending."""
    panel = PANELS_BY_NAME[name]
    if snapshot is None or not snapshot.has(*panel.requires):
        return None
    return panel.build(snapshot)


def build_view(snapshot: Optional[PortfolioSnapshot]) -> Dict[str, Any]:
    """Every panel that can be built from ``snapshot`` right now."""
    view = {}
    for panel in PANELS:
        content = build_panel(panel.name, snapshot)
        if content is not None:
            view[panel.name] = content
    return view


class DashboardView:
    """Store listener that keeps the rendered panels in step with the snapshot.

    ``on_change(panel_name, content)`` is called for every rebuilt panel;
    a presentation layer hooks in there.
    """

    def __init__(self, on_change: Optional[Callable[[str, Any], None]] = None):
        self.panels: Dict[str, Any] = {}
        self.error: Optional[str] = None
        self.on_change = on_change

    def __call__(self, event: SnapshotEvent):
        if event.kind in (STARTED, RESET):
            self.panels.clear()
            self.error = None
        elif event.kind == FAILED:
            self.panels.clear()
            self.error = event.message
        elif event.kind == UPDATED:
            for name in panels_for_field(event.field):
                content = build_panel(name, event.snapshot)
                if content is None:
                    continue
                self.panels[name] = content
                if self.on_change is not None:
                    self.on_change(name, content)

    @property
    def ready(self) -> List[str]:
        return [p.name for p in PANELS if p.name in self.panels]
