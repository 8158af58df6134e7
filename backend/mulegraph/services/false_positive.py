"""
False positive filtering service for MuleGraph.
"""

from typing import List

import pandas as pd

from mulegraph.config import (
    MERCHANT_MAX_MEAN_AMOUNT,
    MERCHANT_MIN_CV,
    PAYROLL_MAX_CV,
)
from mulegraph.models.entities import RECEIVED, SENT, TransactionGraph


FAN_IN = "fan_in"
FAN_OUT = "fan_out"


def _amounts(graph: TransactionGraph, account: str, direction: str) -> pd.Series:
    values: List[float] = [
        entry.transaction.amount
        for entry in graph.history.get(account, [])
        if entry.direction == direction
    ]
    return pd.Series(values, dtype="float64")


def coefficient_of_variation(amounts: pd.Series) -> float:
    """Population standard deviation over mean; 0 when the mean is not positive."""
    if amounts.empty:
        return 0.0
    mean = amounts.mean()
    if mean <= 0:
        return 0.0
    return float(amounts.std(ddof=0) / mean)


def is_legitimate_hub(graph: TransactionGraph, account: str, direction: str) -> bool:
    """
    Decide whether a smurfing hub looks like an ordinary business.

    A fan-in hub that never sends and collects small, varied amounts is a
    merchant. A fan-out hub that never receives and pays near-identical
    amounts is payroll. Hubs with both legs are never exempt.
    """
    stats = graph.stats.get(account)
    if stats is None:
        return False

    if direction == FAN_IN:
        if stats.out_degree > 0:
            return False
        received = _amounts(graph, account, RECEIVED)
        if received.empty or received.mean() >= MERCHANT_MAX_MEAN_AMOUNT:
            return False
        return coefficient_of_variation(received) > MERCHANT_MIN_CV

    if direction == FAN_OUT:
        if stats.in_degree > 0:
            return False
        sent = _amounts(graph, account, SENT)
        if sent.empty:
            return False
        return coefficient_of_variation(sent) < PAYROLL_MAX_CV

    return False
