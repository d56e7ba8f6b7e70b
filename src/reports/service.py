import asyncio
import logging
from typing import List, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.analysis.base import AnalysisProvider, cosine_similarity, patent_text
from src.analysis.schemas import QualityAnalysis, clamp_score
from src.auth.models import User
from src.config import settings
from src.patents.models import Patent
from src.prior_art.models import PriorArt
from src.prior_art.service import PriorArtService
from src.reports.schemas import (
    AIAnalysis,
    AIAnalysisDetail,
    PriorArtReference,
    SearchReport,
    SimilarityAnalysis,
    SimilarPatent,
)

logger = logging.getLogger(__name__)

# References that get their own recommendation
TOP_REFERENCES = 3
NARROWING_THRESHOLD = 0.8
MARKET_EXPANSION_THRESHOLD = 70.0


async def gather_strict(*aws):
    """Like asyncio.gather, but every awaitable settles before the first error is raised."""
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


def uniqueness_from_similarity(overall: float) -> float:
    return round(clamp_score(100.0 - overall * 100.0), 2)


def build_ai_analysis(quality: QualityAnalysis) -> AIAnalysis:
    return AIAnalysis(
        technical_complexity=quality.technical_complexity,
        market_size_estimate=quality.market_potential * 1_000_000,
        competitive_landscape=list(quality.opportunities),
        innovation_score=quality.innovation_score,
        risk_factors=list(quality.risks),
    )


def synthesize_recommendations(similarity: SimilarityAnalysis, quality: QualityAnalysis) -> List[str]:
    recommendations = []
    for ref in similarity.references[:TOP_REFERENCES]:
        if ref.matching_claims:
            recommendations.append(
                f"Differentiate {', '.join(ref.matching_claims)} from {ref.patent_number} ({ref.title})"
            )
        else:
            recommendations.append(f"Review {ref.patent_number} ({ref.title}) for overlapping subject matter")

    if similarity.overall >= NARROWING_THRESHOLD:
        recommendations.append("Narrow the independent claims to features absent from the closest prior art")
    if quality.market_potential >= MARKET_EXPANSION_THRESHOLD:
        recommendations.append("Consider filing in additional jurisdictions to protect the market opportunity")
    for weakness in quality.weaknesses:
        recommendations.append(f"Address weakness: {weakness}")
    recommendations.extend(quality.recommendations)

    deduped = []
    for item in recommendations:
        if item and item not in deduped:
            deduped.append(item)
    return deduped


def _prior_art_text(record: PriorArt) -> str:
    return patent_text(record.title, record.abstract, record.claims or [])


def _text_of(patent: Patent) -> str:
    return patent_text(patent.title, patent.description, patent.claims or [])


class ReportService:
    def __init__(self, db: AsyncSession, provider: AnalysisProvider):
        self.db = db
        self.provider = provider

    async def _analyze_similarity(self, patent: Patent) -> SimilarityAnalysis:
        corpus = await PriorArtService(self.db).corpus(settings.PRIOR_ART_CORPUS_LIMIT)
        if not corpus:
            return SimilarityAnalysis(overall=0.0, references=[])

        claims: Sequence[str] = [c for c in (patent.claims or []) if c]
        patent_vec, corpus_vecs, claim_vecs = await gather_strict(
            self.provider.embed(_text_of(patent)),
            self.provider.embed_many([_prior_art_text(r) for r in corpus]),
            self.provider.embed_many(claims),
        )

        scored = [
            (cosine_similarity(patent_vec, vec), record, vec)
            for record, vec in zip(corpus, corpus_vecs)
        ]
        overall = max(score for score, _, _ in scored)

        relevant = sorted(
            (item for item in scored if item[0] >= settings.PRIOR_ART_MIN_RELEVANCE),
            key=lambda item: item[0],
            reverse=True,
        )[:settings.PRIOR_ART_MAX_REFERENCES]

        references = []
        for score, record, vec in relevant:
            matching = [
                f"Claim {i}"
                for i, claim_vec in enumerate(claim_vecs, start=1)
                if cosine_similarity(claim_vec, vec) >= settings.CLAIM_MATCH_THRESHOLD
            ]
            references.append(PriorArtReference(
                patent_number=record.patent_number,
                title=record.title,
                relevance_score=round(score * 100, 2),
                matching_claims=matching,
                publication_date=record.publication_date.isoformat() if record.publication_date else None,
            ))
        return SimilarityAnalysis(overall=overall, references=references)

    async def generate_report(self, patent: Patent) -> SearchReport:
        """Run similarity and quality analysis, then persist the report onto the patent."""
        similarity, quality = await gather_strict(
            self._analyze_similarity(patent),
            self.provider.analyze_quality(patent.title, patent.description, patent.claims or []),
        )

        report = SearchReport(
            similarity_score=round(similarity.overall * 100, 2),
            prior_art_references=similarity.references,
            ai_analysis=build_ai_analysis(quality),
            recommendations=synthesize_recommendations(similarity, quality),
        )

        patent.search_report = report.model_dump(mode="json")
        patent.uniqueness_score = uniqueness_from_similarity(similarity.overall)
        patent.market_potential = clamp_score(quality.market_potential)
        await self.db.commit()

        logger.info(
            f"Search report for patent {patent.id}: similarity={report.similarity_score}, "
            f"uniqueness={patent.uniqueness_score}, market={patent.market_potential}, "
            f"references={len(report.prior_art_references)}"
        )
        return report

    async def get_ai_analysis(self, patent: Patent) -> AIAnalysisDetail:
        text = _text_of(patent)
        quality, classification, entities, summary = await gather_strict(
            self.provider.analyze_quality(patent.title, patent.description, patent.claims or []),
            self.provider.classify(text),
            self.provider.extract_entities(text),
            self.provider.summarize(text),
        )
        return AIAnalysisDetail(
            **build_ai_analysis(quality).model_dump(),
            technical_classification=classification,
            key_features=entities,
            technical_summary=summary,
        )

    async def similar_patents(self, patent: Patent, user: User) -> List[SimilarPatent]:
        """The caller's other patents ranked by embedding similarity to ``patent``."""
        result = await self.db.execute(
            select(Patent)
            .where(Patent.owner_id == user.id, Patent.id != patent.id)
            .order_by(Patent.created_at.asc())
        )
        others = list(result.scalars().all())
        if not others:
            return []

        source_vec, other_vecs = await gather_strict(
            self.provider.embed(_text_of(patent)),
            self.provider.embed_many([_text_of(p) for p in others]),
        )
        scored = sorted(
            ((cosine_similarity(source_vec, vec), other) for other, vec in zip(others, other_vecs)),
            key=lambda item: item[0],
            reverse=True,
        )
        return [
            SimilarPatent(
                id=other.id,
                title=other.title,
                status=other.status.value,
                technical_field=other.technical_field,
                similarity_score=score,
            )
            for score, other in scored[:settings.SIMILAR_PATENTS_LIMIT]
        ]
