import asyncio
import math
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

import numpy as np

from src.analysis.schemas import ClassificationResult, QualityAnalysis

# CPC sections A-H plus Y, used as the label space for technology classification
CPC_SECTIONS = (
    "Human Necessities",
    "Performing Operations; Transporting",
    "Chemistry; Metallurgy",
    "Textiles; Paper",
    "Fixed Constructions",
    "Mechanical Engineering; Lighting; Heating",
    "Physics",
    "Electricity",
    "Emerging Cross-Sectional Technologies",
)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity bounded to [0, 1].

    Empty, zero-length, mismatched or non-finite vectors score 0.
    """
    if len(a) == 0 or len(b) == 0 or len(a) != len(b):
        return 0.0
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denom == 0.0 or not math.isfinite(denom):
        return 0.0
    score = float(np.dot(va, vb) / denom)
    if not math.isfinite(score):
        return 0.0
    return max(0.0, min(1.0, score))


def patent_text(title: str, description: str, claims: Sequence[str] = ()) -> str:
    parts = [title or "", description or ""]
    parts.extend(c for c in claims or () if c)
    return "\n".join(p for p in parts if p)


class AnalysisProvider(ABC):
    """
    Uniform interface over the model families used for patent analysis.
    Concrete providers are injected into services; nothing here holds global state.
    """

    name: str = "base"

    @abstractmethod
    async def classify(self, text: str, top_k: int = 3) -> List[ClassificationResult]:
        """Technology areas for ``text``, most likely first."""

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        pass

    async def embed_many(self, texts: Sequence[str]) -> List[List[float]]:
        return list(await asyncio.gather(*(self.embed(t) for t in texts)))

    async def similarity(self, text_a: str, text_b: str) -> float:
        vec_a, vec_b = await self.embed_many([text_a, text_b])
        return cosine_similarity(vec_a, vec_b)

    @abstractmethod
    async def summarize(self, text: str, max_words: int = 60) -> str:
        """Plain-prose summary of ``text`` no longer than ``max_words`` words."""

    @abstractmethod
    async def extract_entities(self, text: str) -> Dict[str, List[str]]:
        """Entity spans grouped by label, first occurrence order, no duplicates."""

    @abstractmethod
    async def analyze_quality(self, title: str, description: str, claims: Sequence[str]) -> QualityAnalysis:
        pass


def group_entities(pairs) -> Dict[str, List[str]]:
    grouped: Dict[str, List[str]] = {}
    for label, text in pairs:
        text = (text or "").strip()
        if not text:
            continue
        bucket = grouped.setdefault(label, [])
        if text not in bucket:
            bucket.append(text)
    return grouped


def truncate_words(text: str, max_words: int) -> str:
    words = (text or "").split()
    return " ".join(words[:max_words])
