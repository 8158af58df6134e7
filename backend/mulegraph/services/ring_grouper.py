"""
Ring grouping service for MuleGraph.

Reconciles detected rings with scored accounts so that every ring member is
reported, and derives each ring's risk score from its members.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from mulegraph.config import RING_FLOOR_RATIO, RING_FLOOR_SCORE
from mulegraph.models.entities import AccountStats, Ring, ScoredAccount
from mulegraph.models.schemas import FraudRing, SuspiciousAccount


def _ring_risk(ring: Ring, account_map: Dict[str, ScoredAccount], over_all: bool) -> float:
    scores = [
        account_map[member].suspicion_score
        for member in ring.member_accounts
        if member in account_map
    ]
    if not scores:
        return 0.0
    denominator = len(ring.member_accounts) if over_all else len(scores)
    return sum(scores) / denominator


def _iso(stats: Optional[AccountStats], attr: str) -> Optional[str]:
    if stats is None:
        return None
    value = getattr(stats, attr)
    return value.isoformat() if value is not None else None


def group_rings(
    scored_accounts: Sequence[ScoredAccount],
    rings: Sequence[Ring],
    stats: Dict[str, AccountStats],
) -> Tuple[List[FraudRing], List[SuspiciousAccount]]:
    """Attach every ring member to the report and score the rings."""
    account_map: Dict[str, ScoredAccount] = {
        acc.account_id: ScoredAccount(
            account_id=acc.account_id,
            suspicion_score=acc.suspicion_score,
            detected_patterns=list(acc.detected_patterns),
            ring_ids=list(acc.ring_ids),
        )
        for acc in scored_accounts
    }

    # First pass: risk from members that were scored on their own merit.
    initial_risk = {ring.ring_id: _ring_risk(ring, account_map, over_all=False) for ring in rings}

    for ring in rings:
        for member in ring.member_accounts:
            existing = account_map.get(member)
            if existing is None:
                account_map[member] = ScoredAccount(
                    account_id=member,
                    suspicion_score=max(RING_FLOOR_SCORE, initial_risk[ring.ring_id] * RING_FLOOR_RATIO),
                    detected_patterns=[ring.pattern_type],
                    ring_ids=[ring.ring_id],
                )
            elif ring.ring_id not in existing.ring_ids:
                existing.ring_ids.append(ring.ring_id)

    # Second pass: every member now has a score.
    risk = {ring.ring_id: _ring_risk(ring, account_map, over_all=True) for ring in rings}

    primary: Dict[str, str] = {}
    for ring in rings:
        for member in ring.member_accounts:
            current = primary.get(member)
            if current is None or risk[ring.ring_id] > risk[current]:
                primary[member] = ring.ring_id

    fraud_rings = [
        FraudRing(
            ring_id=ring.ring_id,
            member_accounts=sorted(ring.member_accounts),
            pattern_type=ring.pattern_type,
            risk_score=round(risk[ring.ring_id], 1),
        )
        for ring in rings
    ]

    suspicious_accounts = [
        SuspiciousAccount(
            account_id=acc.account_id,
            suspicion_score=round(acc.suspicion_score, 1),
            detected_patterns=acc.detected_patterns,
            ring_id=primary.get(acc.account_id),
            first_seen=_iso(stats.get(acc.account_id), "first_transaction"),
            last_seen=_iso(stats.get(acc.account_id), "last_transaction"),
        )
        for acc in account_map.values()
    ]
    suspicious_accounts.sort(key=lambda acc: acc.suspicion_score, reverse=True)

    return fraud_rings, suspicious_accounts
