# backend/citeqa/router/health.py
from __future__ import annotations
import logging
from fastapi import APIRouter

from citeqa.router import answer as answer_router
from citeqa.models.schemas import HealthResponse

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
def health_check():
    """Service is running; reports which adapters are wired."""
    service = answer_router.qa_service
    if service is None:
        return HealthResponse(status="starting")
    info = service.describe()
    return HealthResponse(status="ok", retriever=info["retriever"], generator=info["generator"])
