from typing import Dict, List, Sequence

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

from src.analysis.base import CPC_SECTIONS, AnalysisProvider, group_entities, truncate_words
from src.analysis.prompts import (
    CLASSIFIER_SYSTEM_PROMPT,
    ENTITY_SYSTEM_PROMPT,
    QUALITY_ANALYSIS_USER_PROMPT,
    QUALITY_ANALYST_SYSTEM_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
    TEXT_USER_PROMPT,
)
from src.analysis.schemas import (
    ClassificationOutput,
    ClassificationResult,
    EntityExtraction,
    QualityAnalysis,
)


class LLMAnalysisProvider(AnalysisProvider):
    """
    Chat-model backed provider. Structured answers go through
    ``with_structured_output`` so the model's JSON is validated by pydantic.
    """

    name = "llm"

    def __init__(self, chat_model, embeddings):
        self.chat_model = chat_model
        self.embeddings = embeddings

    def _chain(self, system_prompt: str, user_prompt: str, schema=None):
        prompt = ChatPromptTemplate.from_messages([
            ("system", system_prompt),
            ("user", user_prompt),
        ])
        if schema is None:
            return prompt | self.chat_model | StrOutputParser()
        return prompt | self.chat_model.with_structured_output(schema)

    async def classify(self, text: str, top_k: int = 3) -> List[ClassificationResult]:
        chain = self._chain(CLASSIFIER_SYSTEM_PROMPT, TEXT_USER_PROMPT, ClassificationOutput)
        result: ClassificationOutput = await chain.ainvoke({
            "labels": ", ".join(CPC_SECTIONS),
            "text": text,
        })
        ranked = sorted(result.labels, key=lambda r: r.score, reverse=True)
        return ranked[:top_k]

    async def embed(self, text: str) -> List[float]:
        return await self.embeddings.aembed_query(text)

    async def embed_many(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        return await self.embeddings.aembed_documents(list(texts))

    async def summarize(self, text: str, max_words: int = 60) -> str:
        chain = self._chain(SUMMARY_SYSTEM_PROMPT, TEXT_USER_PROMPT)
        summary = await chain.ainvoke({"max_words": max_words, "text": text})
        return truncate_words(summary, max_words)

    async def extract_entities(self, text: str) -> Dict[str, List[str]]:
        chain = self._chain(ENTITY_SYSTEM_PROMPT, TEXT_USER_PROMPT, EntityExtraction)
        result: EntityExtraction = await chain.ainvoke({"text": text})
        return group_entities((e.label.upper(), e.text) for e in result.entities)

    async def analyze_quality(self, title: str, description: str, claims: Sequence[str]) -> QualityAnalysis:
        chain = self._chain(QUALITY_ANALYST_SYSTEM_PROMPT, QUALITY_ANALYSIS_USER_PROMPT, QualityAnalysis)
        claims_text = "\n".join(f"{i}. {c}" for i, c in enumerate(claims or [], start=1)) or "(none)"
        return await chain.ainvoke({
            "title": title,
            "description": description,
            "claims": claims_text,
        })
