"""
Configuration for MuleGraph.

Tunables are read from the environment; structural limits are fixed.
"""

import os


LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
FRONTEND_URL: str = os.getenv("FRONTEND_URL", "*")

# ── Upload limits ──────────────────────────────────────────────────────────────
MAX_FILE_SIZE_MB: int = int(os.getenv("MAX_FILE_SIZE_MB", "5"))
MAX_FILE_SIZE_BYTES: int = MAX_FILE_SIZE_MB * 1024 * 1024

# ── Cycle detection ────────────────────────────────────────────────────────────
CYCLE_MIN_LEN: int = 3
CYCLE_MAX_LEN: int = 5

# ── Smurfing detection ─────────────────────────────────────────────────────────
SMURF_WINDOW_HOURS: int = int(os.getenv("SMURF_WINDOW_HOURS", "72"))
FAN_THRESHOLD: int = int(os.getenv("FAN_THRESHOLD", "10"))

# Merchant: collector hub with small, varied amounts.
MERCHANT_MAX_MEAN_AMOUNT: float = 1000.0
MERCHANT_MIN_CV: float = 0.15
# Payroll: disbursing hub with near-identical amounts.
PAYROLL_MAX_CV: float = 0.10

# ── Shell detection ────────────────────────────────────────────────────────────
SHELL_MAX_TX: int = int(os.getenv("SHELL_MAX_TX", "3"))
SHELL_MIN_EDGES: int = 3
SHELL_MAX_DEPTH: int = 6

# ── Scoring ────────────────────────────────────────────────────────────────────
SCORE_CYCLE: float = 40.0
SCORE_CYCLE_HIGH_AMOUNT: float = 15.0
SCORE_CYCLE_AMOUNT_DECAY: float = 10.0
SCORE_CYCLE_TIGHT_TIME: float = 10.0
SCORE_SMURFING: float = 25.0
SCORE_SMURFING_LARGE: float = 10.0
SCORE_SHELL: float = 15.0
SCORE_HIGH_VELOCITY: float = 10.0
SCORE_SHORT_ACTIVE: float = 5.0
SCORE_LONG_TERM_MITIGATION: float = -20.0

CYCLE_HIGH_AMOUNT: float = 10000.0
CYCLE_TIGHT_HOURS: int = 24
SMURFING_LARGE_RING: int = 15
VELOCITY_WINDOW_HOURS: int = 24
VELOCITY_MIN_TX: int = 5
SHORT_ACTIVE_DAYS: int = 3
LONG_TERM_DAYS: int = 30
LONG_TERM_MIN_TX: int = 50

MIN_SUSPICION_SCORE: float = float(os.getenv("MIN_SUSPICION_SCORE", "30.0"))

# ── Output ─────────────────────────────────────────────────────────────────────
RING_FLOOR_SCORE: float = 20.0
RING_FLOOR_RATIO: float = 0.6
