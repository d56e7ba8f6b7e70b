from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.analysis.base import AnalysisProvider
from src.analysis.factory import get_analysis_provider
from src.auth.dependencies import get_current_active_user
from src.auth.models import User
from src.database import get_db
from src.patents.dependencies import require_owned_patent
from src.patents.models import Patent
from src.reports.schemas import AIAnalysisDetail, SearchReport, SimilarPatent
from src.reports.service import ReportService

router = APIRouter(prefix="/patents/{patent_id}", tags=["reports"])


@router.get("/similar", response_model=List[SimilarPatent])
async def get_similar_patents(
    patent: Patent = Depends(require_owned_patent),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    provider: AnalysisProvider = Depends(get_analysis_provider),
):
    service = ReportService(db, provider)
    return await service.similar_patents(patent, current_user)


@router.get("/analysis", response_model=AIAnalysisDetail)
async def get_ai_analysis(
    patent: Patent = Depends(require_owned_patent),
    db: AsyncSession = Depends(get_db),
    provider: AnalysisProvider = Depends(get_analysis_provider),
):
    service = ReportService(db, provider)
    return await service.get_ai_analysis(patent)


@router.post("/search-report", response_model=SearchReport)
async def generate_search_report(
    patent: Patent = Depends(require_owned_patent),
    db: AsyncSession = Depends(get_db),
    provider: AnalysisProvider = Depends(get_analysis_provider),
):
    service = ReportService(db, provider)
    return await service.generate_report(patent)
