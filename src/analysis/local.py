"""Local encoder models through Hugging Face pipelines.

Install the ``local`` extra to use this provider. Models load lazily on first
use and inference runs in a worker thread so the event loop stays free.
"""
import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from src.analysis.base import CPC_SECTIONS, AnalysisProvider, group_entities, truncate_words
from src.analysis.schemas import ClassificationResult, QualityAnalysis
from src.config import settings

logger = logging.getLogger(__name__)


class TransformersAnalysisProvider(AnalysisProvider):
    name = "transformers"

    def __init__(
        self,
        generator: AnalysisProvider,
        classifier_model: Optional[str] = None,
        embedding_model: Optional[str] = None,
        summary_model: Optional[str] = None,
        ner_model: Optional[str] = None,
    ):
        # Quality analysis needs a generative model; encoders can't produce it
        self.generator = generator
        self.classifier_model = classifier_model or settings.LOCAL_MODEL_CLASSIFIER
        self.embedding_model = embedding_model or settings.LOCAL_MODEL_EMBEDDING
        self.summary_model = summary_model or settings.LOCAL_MODEL_SUMMARY
        self.ner_model = ner_model or settings.LOCAL_MODEL_NER
        self._classifier = None
        self._encoder = None
        self._summarizer = None
        self._ner = None

    def _get_classifier(self):
        if self._classifier is None:
            from transformers import pipeline

            logger.info("Loading zero-shot classifier %s", self.classifier_model)
            self._classifier = pipeline("zero-shot-classification", model=self.classifier_model)
        return self._classifier

    def _get_encoder(self):
        if self._encoder is None:
            from sentence_transformers import SentenceTransformer

            logger.info("Loading sentence encoder %s", self.embedding_model)
            self._encoder = SentenceTransformer(self.embedding_model)
        return self._encoder

    def _get_summarizer(self):
        if self._summarizer is None:
            from transformers import pipeline

            logger.info("Loading summarizer %s", self.summary_model)
            self._summarizer = pipeline("summarization", model=self.summary_model)
        return self._summarizer

    def _get_ner(self):
        if self._ner is None:
            from transformers import pipeline

            logger.info("Loading NER model %s", self.ner_model)
            self._ner = pipeline("ner", model=self.ner_model, aggregation_strategy="simple")
        return self._ner

    async def classify(self, text: str, top_k: int = 3) -> List[ClassificationResult]:
        def run():
            return self._get_classifier()(text, candidate_labels=list(CPC_SECTIONS))

        output = await asyncio.to_thread(run)
        pairs = list(zip(output["labels"], output["scores"]))[:top_k]
        return [ClassificationResult(label=label, score=score) for label, score in pairs]

    async def embed(self, text: str) -> List[float]:
        vectors = await self.embed_many([text])
        return vectors[0]

    async def embed_many(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []

        def run():
            return self._get_encoder().encode(list(texts), normalize_embeddings=True)

        matrix = await asyncio.to_thread(run)
        return [row.tolist() for row in matrix]

    async def summarize(self, text: str, max_words: int = 60) -> str:
        # The pipeline budgets in tokens, roughly four per three words
        max_tokens = max_words * 4 // 3 + 1

        def run():
            return self._get_summarizer()(
                text,
                max_length=max_tokens,
                min_length=min(30, max_tokens),
                truncation=True,
            )

        output = await asyncio.to_thread(run)
        return truncate_words(output[0]["summary_text"], max_words) if output else ""

    async def extract_entities(self, text: str) -> Dict[str, List[str]]:
        def run():
            return self._get_ner()(text)

        output = await asyncio.to_thread(run)
        return group_entities((item["entity_group"], item["word"]) for item in output)

    async def analyze_quality(self, title: str, description: str, claims: Sequence[str]) -> QualityAnalysis:
        return await self.generator.analyze_quality(title, description, claims)
