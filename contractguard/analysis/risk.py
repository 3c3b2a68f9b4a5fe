"""Aggregate clause-level risk signals into a contract risk score."""

from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contractguard.models.risk import (
    ExtractedClause,
    RiskAnalysisResult,
    RiskBreakdown,
    RiskLevel,
)

logger = logging.getLogger(__name__)

# Higher weight = more business impact. A contract carrying every type sums to ~100.
CLAUSE_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "liability": 25,
        "indemnification": 20,
        "data_processing": 15,
        "auto_renewal": 10,
        "termination": 10,
        "payment": 8,
        "ip_ownership": 5,
        "confidentiality": 3,
        "non_compete": 2,
        "non_solicitation": 2,
        "warranty": 2,
        "dispute_resolution": 2,
        "governing_law": 1,
        "force_majeure": 1,
        "other": 1,
    }
)

RISK_LEVEL_SCORES: Mapping[str, float] = MappingProxyType(
    {
        RiskLevel.CRITICAL.value: 100,
        RiskLevel.HIGH.value: 75,
        RiskLevel.MEDIUM.value: 40,
        RiskLevel.LOW.value: 10,
    }
)

RISK_COLORS = MappingProxyType(
    {
        RiskLevel.CRITICAL: "#ef4444",
        RiskLevel.HIGH: "#f97316",
        RiskLevel.MEDIUM: "#eab308",
        RiskLevel.LOW: "#22c55e",
    }
)


class ScoringTables(BaseModel):
    """Weight and score lookup tables used by :class:`RiskScorer`."""

    model_config = ConfigDict(frozen=True)

    clause_weights: Dict[str, float] = Field(default_factory=lambda: dict(CLAUSE_WEIGHTS))
    risk_level_scores: Dict[str, float] = Field(default_factory=lambda: dict(RISK_LEVEL_SCORES))
    default_weight: float = 1
    default_risk_score: float = Field(default=10, ge=0, le=100)
    high_weight_threshold: float = 10
    missing_penalty_factor: float = 0.5
    missing_penalty_score: float = Field(default=40, ge=0, le=100)

    @field_validator("clause_weights", "risk_level_scores")
    @classmethod
    def _non_negative(cls, table: Dict[str, float]) -> Dict[str, float]:
        for key, value in table.items():
            if value < 0:
                raise ValueError(f"{key!r} must not be negative (got {value})")
        return table

    @field_validator("risk_level_scores")
    @classmethod
    def _percentages(cls, table: Dict[str, float]) -> Dict[str, float]:
        for key, value in table.items():
            if value > 100:
                raise ValueError(f"{key!r} score must not exceed 100 (got {value})")
        return table

    def weight_for(self, clause_type: str) -> float:
        return self.clause_weights.get(clause_type, self.default_weight)

    def score_for(self, risk_level: str) -> float:
        return self.risk_level_scores.get(risk_level, self.default_risk_score)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_to_label(score: float) -> RiskLevel:
    if score >= 75:
        return RiskLevel.CRITICAL
    if score >= 50:
        return RiskLevel.HIGH
    if score >= 25:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def risk_color(label: str) -> str:
    """Badge colour for a risk label; unknown labels get the low colour."""
    try:
        return RISK_COLORS[RiskLevel(label)]
    except ValueError:
        return RISK_COLORS[RiskLevel.LOW]


def blend_risk_scores(
    algorithmic: float, llm_score: Optional[float], algorithmic_weight: float = 0.7
) -> int:
    """Combine the weighted score with an optional LLM deep-analysis score."""
    if llm_score is None:
        return round_half_up(min(100.0, max(0.0, algorithmic)))
    if not 0 <= algorithmic_weight <= 1:
        raise ValueError("algorithmic_weight must be between 0 and 1")
    blended = algorithmic * algorithmic_weight + llm_score * (1 - algorithmic_weight)
    return round_half_up(min(100.0, max(0.0, blended)))


class RiskScorer:
    """Weighted average over clause types with duplicate collapse and absence penalties."""

    def __init__(self, tables: Optional[ScoringTables] = None) -> None:
        self.tables = tables or ScoringTables()

    def score(self, clauses: Iterable[ExtractedClause]) -> RiskAnalysisResult:
        clauses = list(clauses)
        if not clauses:
            logger.warning("No clauses provided, returning 0 risk score")
            return RiskAnalysisResult(overall_score=0, risk_label=RiskLevel.LOW)

        tables = self.tables
        # One entry per clause type, holding its highest-scoring occurrence.
        by_type: Dict[str, RiskBreakdown] = {}
        for clause in clauses:
            risk_score = tables.score_for(clause.risk_level)
            existing = by_type.get(clause.clause_type)
            if existing is not None and risk_score <= existing.risk_score:
                continue
            weight = tables.weight_for(clause.clause_type)
            by_type[clause.clause_type] = RiskBreakdown(
                clause_type=clause.clause_type,
                weight=weight,
                risk_level=clause.risk_level,
                risk_score=risk_score,
                weighted_score=weight * risk_score / 100,
                explanation=clause.risk_explanation,
            )

        breakdown: List[RiskBreakdown] = list(by_type.values())
        missing: List[str] = []
        for clause_type, weight in tables.clause_weights.items():
            if weight < tables.high_weight_threshold or clause_type in by_type:
                continue
            missing.append(clause_type)
            penalty_weight = weight * tables.missing_penalty_factor
            breakdown.append(
                RiskBreakdown(
                    clause_type=clause_type,
                    weight=penalty_weight,
                    risk_level=RiskLevel.MEDIUM.value,
                    risk_score=tables.missing_penalty_score,
                    weighted_score=penalty_weight * tables.missing_penalty_score / 100,
                    explanation=f"No {clause_type.replace('_', ' ')} clause found in the contract.",
                )
            )

        total_weight = sum(entry.weight for entry in breakdown)
        weighted_sum = sum(entry.weighted_score for entry in breakdown)
        raw_score = weighted_sum / total_weight * 100 if total_weight > 0 else 0.0
        overall = round_half_up(min(100.0, max(0.0, raw_score)))
        label = score_to_label(overall)

        breakdown.sort(key=lambda entry: entry.weighted_score, reverse=True)
        logger.info(
            "Risk analysis complete (score=%s, label=%s, clauses=%s, missing=%s)",
            overall,
            label.value,
            len(clauses),
            missing,
        )
        return RiskAnalysisResult(
            overall_score=overall,
            risk_label=label,
            breakdown=breakdown,
            missing_high_weight_clauses=missing,
        )


def compute_risk_score(clauses: Iterable[ExtractedClause]) -> RiskAnalysisResult:
    """Score a contract from its classified clauses using the default tables."""
    return RiskScorer().score(clauses)
