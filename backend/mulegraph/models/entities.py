"""
Internal data types shared by the detection pipeline.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import networkx as nx


SENT = "sent"
RECEIVED = "received"


class MuleGraphError(Exception):
    """Base class for errors raised by the detection core."""


class RingIntegrityError(MuleGraphError):
    """A ring references an account the graph knows nothing about."""


@dataclass(frozen=True)
class Transaction:
    transaction_id: str
    sender_id: str
    receiver_id: str
    amount: float
    timestamp: datetime


@dataclass(frozen=True)
class HistoryEntry:
    """A transaction as seen from one of its two accounts."""

    direction: str
    transaction: Transaction

    @property
    def counterpart(self) -> str:
        if self.direction == SENT:
            return self.transaction.receiver_id
        return self.transaction.sender_id


@dataclass
class AccountStats:
    in_degree: int = 0
    out_degree: int = 0
    total_transactions: int = 0
    total_sent: float = 0.0
    total_received: float = 0.0
    first_transaction: Optional[datetime] = None
    last_transaction: Optional[datetime] = None

    def touch(self, timestamp: datetime) -> None:
        if self.first_transaction is None or timestamp < self.first_transaction:
            self.first_transaction = timestamp
        if self.last_transaction is None or timestamp > self.last_transaction:
            self.last_transaction = timestamp

    @property
    def active_span_seconds(self) -> float:
        if self.first_transaction is None or self.last_transaction is None:
            return 0.0
        return (self.last_transaction - self.first_transaction).total_seconds()


@dataclass
class TransactionGraph:
    """Deduplicated directed graph plus per-account aggregates."""

    G: nx.DiGraph = field(default_factory=nx.DiGraph)
    stats: Dict[str, AccountStats] = field(default_factory=dict)
    history: Dict[str, List[HistoryEntry]] = field(default_factory=dict)
    transactions: List[Transaction] = field(default_factory=list)

    @property
    def total_transactions(self) -> int:
        return len(self.transactions)

    @property
    def total_nodes(self) -> int:
        return self.G.number_of_nodes()

    @property
    def total_edges(self) -> int:
        return self.G.number_of_edges()

    def adjacency(self) -> Dict[str, List[str]]:
        return {node: list(self.G.successors(node)) for node in self.G.nodes()}

    def reverse_adjacency(self) -> Dict[str, List[str]]:
        return {node: list(self.G.predecessors(node)) for node in self.G.nodes()}


@dataclass(frozen=True)
class Ring:
    member_accounts: Tuple[str, ...]
    pattern_type: str
    ring_id: str = ""
    main_account: Optional[str] = None

    @property
    def key(self) -> Tuple[str, ...]:
        return self.member_accounts


@dataclass
class ScoredAccount:
    account_id: str
    suspicion_score: float
    detected_patterns: List[str]
    ring_ids: List[str] = field(default_factory=list)
