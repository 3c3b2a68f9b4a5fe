"""Contract ingestion core: text extraction, chunking and risk scoring."""

from .analysis.risk import compute_risk_score
from .ingestion.chunking import chunk_text, count_tokens
from .ingestion.extraction import extract_text

__all__ = ["chunk_text", "compute_risk_score", "count_tokens", "extract_text"]

__version__ = "0.1.0"
