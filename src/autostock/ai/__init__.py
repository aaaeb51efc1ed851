"""AI analysis collaborator for autostock."""

from autostock.ai.analysis import ProductAnalyzer

__all__ = ["ProductAnalyzer"]
