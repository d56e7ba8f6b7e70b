"""Deterministic offline provider.

Useful for local development without API keys and for tests. Embeddings are
hashed bag-of-words vectors, so texts sharing vocabulary score as similar.
"""
import hashlib
import re
from typing import Dict, List, Sequence

import numpy as np

from src.analysis.base import AnalysisProvider, group_entities, truncate_words
from src.analysis.schemas import ClassificationResult, QualityAnalysis

TOKEN_RE = re.compile(r"[a-z0-9]+")
SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")
PHRASE_RE = re.compile(r"\b[A-Z][A-Za-z0-9-]*(?:\s+[A-Z][A-Za-z0-9-]*)*")
QUANTITY_RE = re.compile(r"\b\d+(?:\.\d+)?\s?(?:nm|mm|cm|m|kg|g|mg|Hz|kHz|MHz|GHz|V|mV|W|kW|A|mA|%)(?![A-Za-z])")

STOPWORDS = {
    "the", "and", "for", "with", "that", "this", "from", "are", "was", "were", "has",
    "have", "into", "onto", "its", "their", "which", "wherein", "said", "being", "such",
    "each", "one", "more", "least", "comprising", "comprises", "claim", "method", "system",
}

KEYWORDS = {
    "Electricity": {"circuit", "voltage", "battery", "semiconductor", "transistor", "antenna", "wireless", "signal", "power"},
    "Physics": {"sensor", "optical", "laser", "measurement", "computing", "computer", "software", "data", "processor", "algorithm", "network"},
    "Chemistry; Metallurgy": {"compound", "polymer", "alloy", "catalyst", "chemical", "solution", "reaction", "coating"},
    "Human Necessities": {"medical", "patient", "food", "drug", "therapy", "surgical", "garment", "furniture"},
    "Performing Operations; Transporting": {"vehicle", "drone", "printing", "cutting", "conveyor", "robot", "tool"},
    "Mechanical Engineering; Lighting; Heating": {"engine", "pump", "valve", "gear", "bearing", "turbine", "heating", "lighting", "widget"},
    "Fixed Constructions": {"building", "bridge", "door", "window", "road", "tunnel"},
}


def _tokens(text: str) -> List[str]:
    return [t for t in TOKEN_RE.findall((text or "").lower()) if len(t) > 2 and t not in STOPWORDS]


class StubAnalysisProvider(AnalysisProvider):
    name = "stub"

    DIMENSIONS = 256
    TECHNICAL_COMPLEXITY = 60.0
    MARKET_POTENTIAL = 55.0
    INNOVATION_SCORE = 65.0

    def __init__(self, dimensions: int = DIMENSIONS):
        self.dimensions = dimensions

    async def classify(self, text: str, top_k: int = 3) -> List[ClassificationResult]:
        tokens = set(_tokens(text))
        hits = {label: len(tokens & words) for label, words in KEYWORDS.items()}
        total = sum(hits.values())
        if total == 0:
            return [ClassificationResult(label="Emerging Cross-Sectional Technologies", score=1.0)]
        ranked = sorted(
            ((label, count) for label, count in hits.items() if count),
            key=lambda item: item[1],
            reverse=True,
        )
        return [ClassificationResult(label=label, score=count / total) for label, count in ranked[:top_k]]

    async def embed(self, text: str) -> List[float]:
        vector = np.zeros(self.dimensions, dtype=float)
        for token in _tokens(text):
            digest = hashlib.md5(token.encode("utf-8")).hexdigest()
            vector[int(digest, 16) % self.dimensions] += 1.0
        return vector.tolist()

    async def summarize(self, text: str, max_words: int = 60) -> str:
        text = " ".join((text or "").split())
        summary = ""
        for sentence in SENTENCE_RE.split(text):
            candidate = f"{summary} {sentence}".strip()
            if len(candidate.split()) > max_words:
                break
            summary = candidate
        if not summary and text:
            # First sentence alone is too long
            summary = truncate_words(text, max_words)
        return summary

    async def extract_entities(self, text: str) -> Dict[str, List[str]]:
        pairs = []
        for match in PHRASE_RE.finditer(text or ""):
            words = match.group(0).split()
            # Sentence-initial articles are capitalised too
            while words and words[0].lower() in STOPWORDS | {"a", "an"}:
                words.pop(0)
            phrase = " ".join(words)
            if len(phrase) < 3:
                continue
            pairs.append(("TERM", phrase))
        for match in QUANTITY_RE.finditer(text or ""):
            pairs.append(("QUANTITY", match.group(0)))
        return group_entities(pairs)

    async def analyze_quality(self, title: str, description: str, claims: Sequence[str]) -> QualityAnalysis:
        claims = list(claims or [])
        strengths = [f"{len(claims)} claim(s) drafted"] if claims else []
        weaknesses = [] if claims else ["No claims drafted yet"]
        recommendations = []
        if len(claims) < 3:
            recommendations.append("Add dependent claims covering alternative embodiments")
        return QualityAnalysis(
            technical_complexity=self.TECHNICAL_COMPLEXITY,
            market_potential=self.MARKET_POTENTIAL,
            innovation_score=self.INNOVATION_SCORE,
            strengths=strengths,
            weaknesses=weaknesses,
            opportunities=["Licensing to adjacent markets"],
            risks=["Close prior art may exist"],
            recommendations=recommendations,
        )
