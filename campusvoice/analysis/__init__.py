"""Complaint analysis collaborator (LLM with heuristic fallback)."""

from campusvoice.analysis.analyzer import AnalysisResult, ComplaintAnalyzer, heuristic_analysis

__all__ = ["AnalysisResult", "ComplaintAnalyzer", "heuristic_analysis"]
