"""Clause classification input and risk scoring output models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

CLAUSE_TYPES = (
    "liability",
    "indemnification",
    "data_processing",
    "auto_renewal",
    "termination",
    "payment",
    "confidentiality",
    "ip_ownership",
    "warranty",
    "force_majeure",
    "governing_law",
    "dispute_resolution",
    "non_compete",
    "non_solicitation",
    "other",
)


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


RISK_LEVELS = tuple(level.value for level in RiskLevel)


class ExtractedClause(BaseModel):
    """A clause as classified by the upstream LLM step.

    ``clause_type`` and ``risk_level`` are kept as plain strings: values
    outside the known vocabularies are scored with defaults rather than
    rejected.
    """

    model_config = ConfigDict(frozen=True)

    clause_type: str
    risk_level: str
    risk_explanation: str = ""
    text: Optional[str] = None
    page_number: Optional[int] = None


class RiskBreakdown(BaseModel):
    """Contribution of one clause type to the overall score."""

    model_config = ConfigDict(frozen=True)

    clause_type: str
    weight: float
    risk_level: str
    risk_score: float = Field(ge=0, le=100)
    weighted_score: float
    explanation: str


class RiskAnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall_score: int = Field(ge=0, le=100)
    risk_label: RiskLevel
    breakdown: List[RiskBreakdown] = Field(default_factory=list)
    missing_high_weight_clauses: List[str] = Field(default_factory=list)
