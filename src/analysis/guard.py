import logging
from typing import Callable, Dict, List, Optional, Sequence, Union

from src.analysis.base import AnalysisProvider
from src.analysis.schemas import ClassificationResult, QualityAnalysis
from src.exceptions import AnalysisFailed

logger = logging.getLogger(__name__)

FAIL = "fail"
FALLBACK = "fallback"

ProviderBuilder = Callable[[], AnalysisProvider]


class GuardedAnalysisProvider(AnalysisProvider):
    """
    Applies the configured failure policy around another provider.

    ``fail`` turns any provider error into ``AnalysisFailed``. ``fallback``
    logs a warning and answers with neutral defaults instead.

    ``inner`` may be a provider or a zero-argument builder. A builder runs on
    first use, so a missing model or API key surfaces as an analysis failure
    for the call that needed it rather than at import or dependency time.
    A failed build is retried on the next call.
    """

    def __init__(
        self,
        inner: Union[AnalysisProvider, ProviderBuilder],
        policy: str = FAIL,
        name: Optional[str] = None,
    ):
        if policy not in (FAIL, FALLBACK):
            raise ValueError(f"Unknown analysis failure policy: {policy!r}")
        self.policy = policy
        if isinstance(inner, AnalysisProvider):
            self._inner: Optional[AnalysisProvider] = inner
            self._builder: Optional[ProviderBuilder] = None
            self.name = name or inner.name
        else:
            self._inner = None
            self._builder = inner
            self.name = name or "lazy"

    @property
    def inner(self) -> AnalysisProvider:
        if self._inner is None:
            self._inner = self._builder()
        return self._inner

    async def _call(self, operation: str, default, call: Callable[[AnalysisProvider], object]):
        try:
            return await call(self.inner)
        except AnalysisFailed:
            raise
        except Exception as e:
            if self.policy == FALLBACK:
                logger.warning("Analysis provider %s failed on %s, using defaults: %s", self.name, operation, e)
                return default
            logger.exception("Analysis provider %s failed on %s", self.name, operation)
            raise AnalysisFailed(f"Analysis failed during {operation}") from e

    async def classify(self, text: str, top_k: int = 3) -> List[ClassificationResult]:
        return await self._call("classify", [], lambda p: p.classify(text, top_k))

    async def embed(self, text: str) -> List[float]:
        return await self._call("embed", [], lambda p: p.embed(text))

    async def embed_many(self, texts: Sequence[str]) -> List[List[float]]:
        return await self._call("embed", [[] for _ in texts], lambda p: p.embed_many(texts))

    async def summarize(self, text: str, max_words: int = 60) -> str:
        return await self._call("summarize", "", lambda p: p.summarize(text, max_words))

    async def extract_entities(self, text: str) -> Dict[str, List[str]]:
        return await self._call("extract_entities", {}, lambda p: p.extract_entities(text))

    async def analyze_quality(self, title: str, description: str, claims: Sequence[str]) -> QualityAnalysis:
        return await self._call(
            "analyze_quality",
            QualityAnalysis.neutral(),
            lambda p: p.analyze_quality(title, description, claims),
        )
