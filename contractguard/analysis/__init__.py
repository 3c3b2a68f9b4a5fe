"""Contract-level risk scoring."""

from .risk import RiskScorer, ScoringTables, compute_risk_score

__all__ = ["RiskScorer", "ScoringTables", "compute_risk_score"]
