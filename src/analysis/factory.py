from functools import lru_cache

from src.analysis.base import AnalysisProvider
from src.analysis.guard import GuardedAnalysisProvider
from src.config import settings


def build_analysis_provider(name: str, policy: str) -> AnalysisProvider:
    """
    Guarded provider for ``name``.

    Model-backed providers are built on first use, so a missing API key or
    model only fails the analysis calls, under the configured policy.
    """
    if name == "stub":
        from src.analysis.stub import StubAnalysisProvider

        return GuardedAnalysisProvider(StubAnalysisProvider(), policy)
    if name == "llm":
        return GuardedAnalysisProvider(_build_llm_provider, policy, name="llm")
    if name == "transformers":
        return GuardedAnalysisProvider(_build_transformers_provider, policy, name="transformers")
    raise ValueError(f"Unknown analysis provider: {name!r}")


def _build_llm_provider() -> AnalysisProvider:
    from src.analysis.llm import LLMAnalysisProvider
    from src.llm import get_embeddings, get_primary_llm

    return LLMAnalysisProvider(get_primary_llm(), get_embeddings())


def _build_transformers_provider() -> AnalysisProvider:
    from src.analysis.local import TransformersAnalysisProvider

    return TransformersAnalysisProvider(generator=_build_llm_provider())


@lru_cache
def _configured_provider() -> AnalysisProvider:
    return build_analysis_provider(settings.ANALYSIS_PROVIDER, settings.ANALYSIS_FAILURE_POLICY)


def get_analysis_provider() -> AnalysisProvider:
    """FastAPI dependency. Override it in tests to inject a fake provider."""
    return _configured_provider()
