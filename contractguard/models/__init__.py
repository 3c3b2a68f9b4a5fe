"""Typed models shared across the package."""

from .chunk import TextChunk
from .document import ExtractionMethod, ExtractionResult, FileType
from .risk import (
    CLAUSE_TYPES,
    RISK_LEVELS,
    ExtractedClause,
    RiskAnalysisResult,
    RiskBreakdown,
    RiskLevel,
)

__all__ = [
    "CLAUSE_TYPES",
    "ExtractedClause",
    "ExtractionMethod",
    "ExtractionResult",
    "FileType",
    "RISK_LEVELS",
    "RiskAnalysisResult",
    "RiskBreakdown",
    "RiskLevel",
    "TextChunk",
]
