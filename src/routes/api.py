from fastapi import APIRouter

from src.auth.router import router as auth_router
from src.patents.router import router as patents_router
from src.documents.router import router as documents_router
from src.reports.router import router as reports_router
from src.prior_art.router import router as prior_art_router
from src.subscriptions.router import router as subscriptions_router

api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(patents_router)
api_router.include_router(documents_router)
api_router.include_router(reports_router)
api_router.include_router(prior_art_router)
api_router.include_router(subscriptions_router)
