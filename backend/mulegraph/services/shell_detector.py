"""
Shell network detection service for MuleGraph.

A shell network is a directed chain of at least three hops whose interior
accounts are all nearly dormant (few transactions), i.e. disposable conduits.
"""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, List, Sequence, Set, Tuple

from mulegraph.config import SHELL_MAX_DEPTH, SHELL_MAX_TX, SHELL_MIN_EDGES
from mulegraph.models.entities import Ring, TransactionGraph


logger = logging.getLogger(__name__)

SHELL_NETWORK = "shell_network"


@dataclass
class ShellResult:
    rings: List[Ring] = field(default_factory=list)
    accounts: Set[str] = field(default_factory=set)


def get_shell_candidates(graph: TransactionGraph) -> Set[str]:
    """Accounts with too little activity to be anything but a pass-through."""
    return {
        account
        for account, stats in graph.stats.items()
        if stats.total_transactions <= SHELL_MAX_TX
    }


def _chains_from(
    graph: TransactionGraph, start_node: str, shells: Set[str]
) -> List[Tuple[str, ...]]:
    chains: List[Tuple[str, ...]] = []

    def frame(path: Tuple[str, ...]):
        # The tail may only be extended through if it becomes an intermediate
        # that is a shell, and only while the depth cap allows.
        if len(path) > SHELL_MAX_DEPTH or (len(path) >= 2 and path[-1] not in shells):
            return path, iter(())
        return path, iter(graph.G.successors(path[-1]))

    stack = [frame((start_node,))]
    while stack:
        path, neighbors = stack[-1]
        neighbor = next(neighbors, None)
        if neighbor is None:
            stack.pop()
            continue
        if neighbor in path:
            continue
        extended = path + (neighbor,)
        if len(extended) - 1 >= SHELL_MIN_EDGES:
            chains.append(extended)
        stack.append(frame(extended))

    return chains


def _has_shell_interior(chain: Sequence[str], shells: Set[str]) -> bool:
    return all(node in shells for node in chain[1:-1])


def detect_shell_networks(
    graph: TransactionGraph, cycle_rings: Sequence[Ring] = ()
) -> ShellResult:
    """
    Detect layered shell chains.

    Chains whose accounts all belong to one already-detected cycle are left
    to the cycle ring. ``cycle_rings`` is only read.
    """
    shells = get_shell_candidates(graph)
    cycle_sets: List[FrozenSet[str]] = [frozenset(r.member_accounts) for r in cycle_rings]

    result = ShellResult()
    seen: Set[Tuple[str, ...]] = set()

    for start_node in graph.G.nodes():
        for chain in _chains_from(graph, start_node, shells):
            if not _has_shell_interior(chain, shells):
                continue
            canonical = tuple(sorted(chain))
            if canonical in seen:
                continue
            members = frozenset(chain)
            if any(members <= cycle_set for cycle_set in cycle_sets):
                continue
            seen.add(canonical)
            result.rings.append(Ring(member_accounts=canonical, pattern_type=SHELL_NETWORK))
            result.accounts.update(canonical)

    logger.debug("Found %d shell chains", len(result.rings))
    return result
