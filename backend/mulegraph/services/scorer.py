"""
Suspicion scoring service for MuleGraph.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, Sequence

import pandas as pd

from mulegraph.config import (
    CYCLE_HIGH_AMOUNT,
    CYCLE_TIGHT_HOURS,
    LONG_TERM_DAYS,
    LONG_TERM_MIN_TX,
    MIN_SUSPICION_SCORE,
    SCORE_CYCLE,
    SCORE_CYCLE_AMOUNT_DECAY,
    SCORE_CYCLE_HIGH_AMOUNT,
    SCORE_CYCLE_TIGHT_TIME,
    SCORE_HIGH_VELOCITY,
    SCORE_LONG_TERM_MITIGATION,
    SCORE_SHELL,
    SCORE_SHORT_ACTIVE,
    SCORE_SMURFING,
    SCORE_SMURFING_LARGE,
    SHORT_ACTIVE_DAYS,
    SMURFING_LARGE_RING,
    VELOCITY_MIN_TX,
    VELOCITY_WINDOW_HOURS,
)
from mulegraph.models.entities import (
    HistoryEntry,
    Ring,
    RingIntegrityError,
    ScoredAccount,
    TransactionGraph,
)


logger = logging.getLogger(__name__)

SMURFING = "smurfing"
SPECIFIC_SMURFING = {"smurfing_fan_in", "smurfing_fan_out"}


@dataclass(frozen=True)
class CycleMetrics:
    avg_amount: float
    has_decay: bool
    tight_time: bool


def _ring_frame(graph: TransactionGraph, ring: Ring) -> pd.DataFrame:
    """Transactions running between members of ``ring``, once each, by time."""
    members = set(ring.member_accounts)
    rows = []
    for account in ring.member_accounts:
        for entry in graph.history.get(account, []):
            tx = entry.transaction
            if tx.sender_id in members and tx.receiver_id in members:
                rows.append(
                    {
                        "transaction_id": tx.transaction_id,
                        "amount": tx.amount,
                        "timestamp": tx.timestamp,
                    }
                )
    if not rows:
        return pd.DataFrame(columns=["transaction_id", "amount", "timestamp"])
    df = pd.DataFrame(rows).drop_duplicates(subset="transaction_id")
    return df.sort_values("timestamp", kind="stable").reset_index(drop=True)


def compute_cycle_metrics(graph: TransactionGraph, ring: Ring) -> CycleMetrics:
    df = _ring_frame(graph, ring)
    if df.empty:
        return CycleMetrics(avg_amount=0.0, has_decay=False, tight_time=False)

    amounts = df["amount"].astype(float)
    has_decay = len(df) >= 3 and amounts.is_monotonic_decreasing

    tight_time = False
    if len(df) >= 2:
        span = df["timestamp"].iloc[-1] - df["timestamp"].iloc[0]
        tight_time = span <= timedelta(hours=CYCLE_TIGHT_HOURS)

    return CycleMetrics(
        avg_amount=float(amounts.mean()),
        has_decay=bool(has_decay),
        tight_time=bool(tight_time),
    )


def has_high_velocity(
    entries: Sequence[HistoryEntry],
    window: timedelta = timedelta(hours=VELOCITY_WINDOW_HOURS),
    min_tx: int = VELOCITY_MIN_TX,
) -> bool:
    """True if ``min_tx`` transactions fall inside some window of ``window``."""
    if len(entries) < min_tx:
        return False
    times = sorted(entry.transaction.timestamp for entry in entries)
    left = 0
    for right, current in enumerate(times):
        while current - times[left] > window:
            left += 1
        if right - left + 1 >= min_tx:
            return True
    return False


def _memberships(graph: TransactionGraph, rings: Sequence[Ring]) -> Dict[str, List[Ring]]:
    by_account: Dict[str, List[Ring]] = {}
    for ring in rings:
        for account in ring.member_accounts:
            if account not in graph.stats:
                raise RingIntegrityError(
                    f"{ring.ring_id or ring.pattern_type} references unknown account {account!r}"
                )
            by_account.setdefault(account, []).append(ring)
    return by_account


def score_accounts(
    graph: TransactionGraph,
    cycles: Sequence[Ring],
    smurfing_rings: Sequence[Ring],
    shell_rings: Sequence[Ring],
) -> List[ScoredAccount]:
    """
    Score every account and keep the ones worth reporting.

    Per-ring bonuses are added once per qualifying ring and the total is
    clamped afterwards, so an account sitting in two high-value cycles can
    saturate at 100.
    """
    cycle_meta = {ring.key: compute_cycle_metrics(graph, ring) for ring in cycles}
    in_cycles = _memberships(graph, cycles)
    in_smurfing = _memberships(graph, smurfing_rings)
    in_shells = _memberships(graph, shell_rings)

    short_active = timedelta(days=SHORT_ACTIVE_DAYS).total_seconds()
    long_term = timedelta(days=LONG_TERM_DAYS).total_seconds()

    scored_accounts: List[ScoredAccount] = []

    for account, stats in graph.stats.items():
        if stats.total_transactions == 0:
            continue

        score = 0.0
        patterns: List[str] = []
        ring_ids: List[str] = []

        # --- 1. Cycles ---
        if account in in_cycles:
            score += SCORE_CYCLE
            patterns.append("cycle")
            for ring in in_cycles[account]:
                ring_ids.append(ring.ring_id)
                meta = cycle_meta[ring.key]
                if meta.avg_amount > CYCLE_HIGH_AMOUNT:
                    score += SCORE_CYCLE_HIGH_AMOUNT
                if meta.has_decay:
                    score += SCORE_CYCLE_AMOUNT_DECAY
                if meta.tight_time:
                    score += SCORE_CYCLE_TIGHT_TIME

        # --- 2. Smurfing ---
        if account in in_smurfing:
            score += SCORE_SMURFING
            patterns.append(SMURFING)
            for ring in in_smurfing[account]:
                if ring.pattern_type not in patterns:
                    patterns.append(ring.pattern_type)
                ring_ids.append(ring.ring_id)
                if len(ring.member_accounts) >= SMURFING_LARGE_RING:
                    score += SCORE_SMURFING_LARGE
            if SPECIFIC_SMURFING.intersection(patterns):
                patterns.remove(SMURFING)

        # --- 3. Shell networks ---
        if account in in_shells:
            score += SCORE_SHELL
            patterns.append("shell_network")
            ring_ids.extend(ring.ring_id for ring in in_shells[account])

        # --- 4. Behavioral signals ---
        if has_high_velocity(graph.history.get(account, [])):
            score += SCORE_HIGH_VELOCITY
            patterns.append("high_velocity")

        span = stats.active_span_seconds
        if span < short_active:
            score += SCORE_SHORT_ACTIVE
            patterns.append("short_active_period")

        if span > long_term and stats.total_transactions > LONG_TERM_MIN_TX:
            score += SCORE_LONG_TERM_MITIGATION

        final_score = max(0.0, min(score, 100.0))

        # Behavioral labels never surface an account on their own.
        in_any_ring = account in in_cycles or account in in_smurfing or account in in_shells
        if final_score < MIN_SUSPICION_SCORE or not in_any_ring:
            continue

        scored_accounts.append(
            ScoredAccount(
                account_id=account,
                suspicion_score=final_score,
                detected_patterns=list(dict.fromkeys(patterns)),
                ring_ids=list(dict.fromkeys(ring_ids)),
            )
        )

    logger.debug("Scored %d accounts above threshold", len(scored_accounts))
    return sorted(scored_accounts, key=lambda x: x.suspicion_score, reverse=True)
