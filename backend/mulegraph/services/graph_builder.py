"""
Graph building utilities for MuleGraph.
"""

import logging
from typing import Iterable

from mulegraph.models.entities import (
    RECEIVED,
    SENT,
    AccountStats,
    HistoryEntry,
    Transaction,
    TransactionGraph,
)


logger = logging.getLogger(__name__)


def _ensure_account(graph: TransactionGraph, account: str) -> AccountStats:
    stats = graph.stats.get(account)
    if stats is None:
        stats = AccountStats()
        graph.stats[account] = stats
        graph.history[account] = []
        graph.G.add_node(account)
    return stats


def build_graph(transactions: Iterable[Transaction]) -> TransactionGraph:
    """
    Fold transactions into a deduplicated directed graph.

    Repeated sender/receiver pairs collapse into one edge; the individual
    transactions stay available in each account's history.
    """
    graph = TransactionGraph()

    for tx in transactions:
        sender_stats = _ensure_account(graph, tx.sender_id)
        receiver_stats = _ensure_account(graph, tx.receiver_id)

        graph.G.add_edge(tx.sender_id, tx.receiver_id)

        sender_stats.out_degree += 1
        sender_stats.total_transactions += 1
        sender_stats.total_sent += tx.amount

        receiver_stats.in_degree += 1
        receiver_stats.total_transactions += 1
        receiver_stats.total_received += tx.amount

        sender_stats.touch(tx.timestamp)
        receiver_stats.touch(tx.timestamp)

        graph.history[tx.sender_id].append(HistoryEntry(SENT, tx))
        graph.history[tx.receiver_id].append(HistoryEntry(RECEIVED, tx))
        graph.transactions.append(tx)

    logger.debug(
        "Built graph with %d nodes, %d edges from %d transactions",
        graph.total_nodes,
        graph.total_edges,
        graph.total_transactions,
    )
    return graph
