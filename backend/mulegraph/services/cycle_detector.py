"""
Cycle detection service for MuleGraph.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Set, Tuple

from mulegraph.config import CYCLE_MAX_LEN, CYCLE_MIN_LEN
from mulegraph.models.entities import Ring, TransactionGraph


logger = logging.getLogger(__name__)

CYCLE = "cycle"


@dataclass
class CycleResult:
    rings: List[Ring] = field(default_factory=list)
    accounts: Set[str] = field(default_factory=set)


def _cycles_from(graph: TransactionGraph, start_node: str) -> List[Tuple[str, ...]]:
    """
    Depth-limited DFS returning every simple cycle through ``start_node``.

    Each stack frame owns its path, so nothing has to be undone on backtrack.
    """
    found: List[Tuple[str, ...]] = []
    stack = [((start_node,), iter(graph.G.successors(start_node)))]

    while stack:
        path, neighbors = stack[-1]
        neighbor = next(neighbors, None)
        if neighbor is None:
            stack.pop()
            continue

        if neighbor == start_node:
            if CYCLE_MIN_LEN <= len(path) <= CYCLE_MAX_LEN:
                found.append(path)
        elif neighbor not in path and len(path) < CYCLE_MAX_LEN:
            stack.append((path + (neighbor,), iter(graph.G.successors(neighbor))))

    return found


def find_cycles(graph: TransactionGraph) -> CycleResult:
    """
    Detect cycles of 3 to 5 accounts.

    Rotations and reversed traversals of the same account set collapse into
    one ring keyed by the sorted member list.
    """
    result = CycleResult()
    seen: Set[Tuple[str, ...]] = set()

    for start_node in graph.G.nodes():
        for path in _cycles_from(graph, start_node):
            canonical = tuple(sorted(path))
            if canonical in seen:
                continue
            seen.add(canonical)
            result.rings.append(Ring(member_accounts=canonical, pattern_type=CYCLE))
            result.accounts.update(path)

    logger.debug("Found %d unique cycles", len(result.rings))
    return result
