"""
Ring identifier sequence for MuleGraph.
"""

from dataclasses import replace
from typing import Iterable, List

from mulegraph.models.entities import Ring


class RingIdSequence:
    """Hands out RING_001, RING_002, ... for a single analysis run.

    Create one per run; instances are never shared between runs.
    """

    def __init__(self, prefix: str = "RING") -> None:
        self.prefix = prefix
        self._counter = 0

    def next_id(self) -> str:
        self._counter += 1
        return f"{self.prefix}_{self._counter:03d}"

    def label(self, rings: Iterable[Ring]) -> List[Ring]:
        """Return copies of ``rings`` carrying freshly assigned ids, in order."""
        return [replace(ring, ring_id=self.next_id()) for ring in rings]
