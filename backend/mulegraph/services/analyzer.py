"""
Analysis pipeline for MuleGraph.

``analyze`` is the single entry point of the detection core: it owns every
piece of working state for one run, including the ring id sequence.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Iterator, Sequence

from mulegraph.models.entities import Transaction
from mulegraph.models.schemas import AnalysisResponse, AnalysisSummary
from mulegraph.services.cycle_detector import find_cycles
from mulegraph.services.graph_builder import build_graph
from mulegraph.services.ring_grouper import group_rings
from mulegraph.services.scorer import score_accounts
from mulegraph.services.shell_detector import detect_shell_networks
from mulegraph.services.smurfing import detect_smurfing
from mulegraph.utils.ring_ids import RingIdSequence


logger = logging.getLogger(__name__)


@contextmanager
def _timed(label: str) -> Iterator[None]:
    started = time.perf_counter()
    yield
    logger.info("Stage [%s] took %.4f seconds", label, time.perf_counter() - started)


def analyze(transactions: Sequence[Transaction]) -> AnalysisResponse:
    """Run graph construction, detection, scoring and formatting on one batch."""
    start_time = time.perf_counter()
    ring_ids = RingIdSequence()

    with _timed("graph"):
        graph = build_graph(transactions)

    # Cycle and smurfing detection are independent; shell detection reads
    # the finished cycle rings.
    with _timed("detection"), ThreadPoolExecutor(max_workers=3) as executor:
        future_cycles = executor.submit(find_cycles, graph)
        future_smurfing = executor.submit(detect_smurfing, graph)

        cycle_result = future_cycles.result()
        future_shells = executor.submit(detect_shell_networks, graph, cycle_result.rings)

        smurfing_result = future_smurfing.result()
        shell_result = future_shells.result()

    # Ids follow detector order, not thread completion order.
    cycles = ring_ids.label(cycle_result.rings)
    smurfing_rings = ring_ids.label(smurfing_result.rings)
    shell_rings = ring_ids.label(shell_result.rings)

    logger.info(
        "Detected %d cycle, %d smurfing and %d shell rings across %d accounts",
        len(cycles),
        len(smurfing_rings),
        len(shell_rings),
        graph.total_nodes,
    )

    with _timed("scoring"):
        scored_accounts = score_accounts(graph, cycles, smurfing_rings, shell_rings)

    with _timed("formatting"):
        fraud_rings, suspicious_accounts = group_rings(
            scored_accounts, cycles + smurfing_rings + shell_rings, graph.stats
        )

    processing_time = time.perf_counter() - start_time

    return AnalysisResponse(
        suspicious_accounts=suspicious_accounts,
        fraud_rings=fraud_rings,
        summary=AnalysisSummary(
            total_accounts_analyzed=graph.total_nodes,
            suspicious_accounts_flagged=len(suspicious_accounts),
            fraud_rings_detected=len(fraud_rings),
            processing_time_seconds=max(0.1, round(processing_time, 1)),
        ),
    )
