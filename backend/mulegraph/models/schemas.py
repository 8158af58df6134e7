"""
Pydantic schemas for the MuleGraph API.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class SuspiciousAccount(BaseModel):
    account_id: str
    suspicion_score: float = Field(..., ge=0.0, le=100.0)
    detected_patterns: List[str]
    ring_id: Optional[str] = None
    first_seen: Optional[str] = None
    last_seen: Optional[str] = None


class FraudRing(BaseModel):
    ring_id: str
    member_accounts: List[str]
    pattern_type: str
    risk_score: float = Field(..., ge=0.0, le=100.0)


class AnalysisSummary(BaseModel):
    total_accounts_analyzed: int
    suspicious_accounts_flagged: int
    fraud_rings_detected: int
    processing_time_seconds: float


class AnalysisResponse(BaseModel):
    suspicious_accounts: List[SuspiciousAccount]
    fraud_rings: List[FraudRing]
    summary: AnalysisSummary
