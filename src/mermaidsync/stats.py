"""Engine counters for diagnostics.

Every engine keeps an ``EngineStats`` instance. Counters only ever increase;
they are cheap enough to keep on unconditionally.

Example:
    engine.reconcile(doc)
    await engine.wait_idle()
    print(engine.stats.summary())
    # {"scans": 1, "placements": 2, "scheduled": 2, "renders_started": 2, ...}

"""

from dataclasses import dataclass, field, fields
from time import perf_counter
from typing import Any


@dataclass(slots=True)
class EngineStats:
    """Accumulated engine activity.

    Attributes:
        scans: ``reconcile`` calls completed
        placements: Placements emitted across all scans
        scheduled: Renders scheduled (including ones later superseded)
        renders_started: Renders whose debounce window elapsed
        renders_succeeded: Renders that updated their container with a diagram
        renders_failed: Renders that left an error on their container
        renders_discarded: Completed renders dropped as stale
        evicted: Cache entries evicted by the missing-identifier sweep

    """

    scans: int = 0
    placements: int = 0
    scheduled: int = 0
    renders_started: int = 0
    renders_succeeded: int = 0
    renders_failed: int = 0
    renders_discarded: int = 0
    evicted: int = 0
    start_time: float = field(default_factory=perf_counter, repr=False)

    @property
    def uptime_ms(self) -> float:
        """Milliseconds since the stats were created."""
        return (perf_counter() - self.start_time) * 1000

    def summary(self) -> dict[str, Any]:
        """Return all counters as a dict, plus ``uptime_ms``."""
        counters = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "start_time"}
        counters["uptime_ms"] = round(self.uptime_ms, 2)
        return counters


__all__ = ["EngineStats"]
