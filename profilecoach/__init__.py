from .interpreter import interpret
from .schemas import AnalysisResult, Suggestion

__all__ = ["AnalysisResult", "Suggestion", "interpret"]
