"""
Smurfing detection service for MuleGraph.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List, Optional, Set, Tuple

from mulegraph.config import FAN_THRESHOLD, SMURF_WINDOW_HOURS
from mulegraph.models.entities import (
    RECEIVED,
    SENT,
    HistoryEntry,
    Ring,
    TransactionGraph,
)
from mulegraph.services.false_positive import FAN_IN, FAN_OUT, is_legitimate_hub


logger = logging.getLogger(__name__)

PATTERN_BY_DIRECTION = {
    FAN_OUT: "smurfing_fan_out",
    FAN_IN: "smurfing_fan_in",
}


@dataclass
class SmurfingResult:
    rings: List[Ring] = field(default_factory=list)
    accounts: Set[str] = field(default_factory=set)


def _group_by_hub(graph: TransactionGraph, direction: str) -> Dict[str, List[HistoryEntry]]:
    """
    Collect each hub's transactions in one direction.

    Hubs are ordered by their first transaction in that direction, not by
    their first appearance in any role.
    """
    hubs: Dict[str, List[HistoryEntry]] = {}
    for tx in graph.transactions:
        if direction == FAN_OUT:
            hubs.setdefault(tx.sender_id, []).append(HistoryEntry(SENT, tx))
        else:
            hubs.setdefault(tx.receiver_id, []).append(HistoryEntry(RECEIVED, tx))
    return hubs


def window_counterparts(
    entries: List[HistoryEntry],
    window: timedelta = timedelta(hours=SMURF_WINDOW_HOURS),
    threshold: int = FAN_THRESHOLD,
) -> Set[str]:
    """
    Slide a time window over the hub's transactions.

    Every window holding at least ``threshold`` distinct counterparts
    contributes all of its counterparts to the result.
    """
    txs = sorted(entries, key=lambda entry: entry.transaction.timestamp)
    in_window: Dict[str, int] = {}
    collected: Set[str] = set()
    left = 0

    for right, entry in enumerate(txs):
        counterpart = entry.counterpart
        in_window[counterpart] = in_window.get(counterpart, 0) + 1

        right_time = entry.transaction.timestamp
        while right_time - txs[left].transaction.timestamp > window:
            leaving = txs[left].counterpart
            in_window[leaving] -= 1
            if in_window[leaving] == 0:
                del in_window[leaving]
            left += 1

        if len(in_window) >= threshold:
            collected.update(in_window)

    return collected


def _hub_ring(
    graph: TransactionGraph, hub: str, entries: List[HistoryEntry], direction: str
) -> Optional[Ring]:
    counterparts = window_counterparts(entries)
    if not counterparts:
        return None
    if is_legitimate_hub(graph, hub, direction):
        logger.debug("Skipping legitimate %s hub %s", direction, hub)
        return None
    members = tuple(sorted(counterparts | {hub}))
    return Ring(
        member_accounts=members,
        pattern_type=PATTERN_BY_DIRECTION[direction],
        main_account=hub,
    )


def detect_smurfing(graph: TransactionGraph) -> SmurfingResult:
    """Detect fan-out then fan-in structuring rings."""
    result = SmurfingResult()
    seen: Set[Tuple[str, ...]] = set()

    for direction in (FAN_OUT, FAN_IN):
        for hub, entries in _group_by_hub(graph, direction).items():
            if len(entries) < FAN_THRESHOLD:
                continue
            ring = _hub_ring(graph, hub, entries, direction)
            if ring is None or ring.key in seen:
                continue
            seen.add(ring.key)
            result.rings.append(ring)
            result.accounts.update(ring.member_accounts)

    logger.debug("Found %d smurfing rings", len(result.rings))
    return result
