from src.analysis.base import AnalysisProvider, cosine_similarity
from src.analysis.factory import build_analysis_provider, get_analysis_provider
from src.analysis.guard import GuardedAnalysisProvider
from src.analysis.schemas import ClassificationResult, QualityAnalysis

__all__ = [
    "AnalysisProvider",
    "ClassificationResult",
    "GuardedAnalysisProvider",
    "QualityAnalysis",
    "build_analysis_provider",
    "cosine_similarity",
    "get_analysis_provider",
]
