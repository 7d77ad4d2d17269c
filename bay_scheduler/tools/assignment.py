"""Bay assignment: first bay in priority order that admits the window."""

import logging
from typing import Optional, Sequence

from bay_scheduler.schemas.shop_schema import Bay
from bay_scheduler.tools.availability import AvailabilityEngine, Occupancy, Verdict
from bay_scheduler.tools.timewindow import Window

logger = logging.getLogger(__name__)


class BayAssignmentPolicy:
    """Greedy, deterministic assignment over an ordered bay list.

    No load balancing: bay 1 is always tried before bay 2.
    """

    def __init__(self, engine: AvailabilityEngine, bays: Sequence[Bay]) -> None:
        if not bays:
            raise ValueError("At least one bay is required")
        ids = [b.id for b in bays]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate bay ids: {ids}")
        self.engine = engine
        self.bays: tuple[Bay, ...] = tuple(bays)

    def get_bay(self, bay_id: str) -> Optional[Bay]:
        for bay in self.bays:
            if bay.id == bay_id:
                return bay
        return None

    def assign(self, window: Window, known: Sequence[Occupancy]) -> Optional[Bay]:
        """Return the first admissible bay, or None when all are exhausted."""
        for bay in self.bays:
            if self.engine.is_available(window, bay.id, known):
                return bay
        logger.debug("No bay free for %s - %s", window.start, window.end)
        return None

    def check_bay(self, window: Window, bay_id: str, known: Sequence[Occupancy]) -> Verdict:
        """Re-validate one caller-chosen bay without re-running assignment."""
        return self.engine.verdict(window, bay_id, known)
