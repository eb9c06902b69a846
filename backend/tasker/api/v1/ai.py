"""AI endpoints: task breakdown, model discovery, pricing refresh and call logs."""

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasker.ai import call_log
from tasker.ai.schemas import (
    AILogClearResponse,
    AILogResponse,
    BreakdownRequest,
    BreakdownResponse,
    ModelsRequest,
    ModelsResponse,
    PricingRefreshRequest,
    PricingRefreshResponse,
)
from tasker.ai.service import AIService
from tasker.api.errors import handle_service_error
from tasker.config import get_settings
from tasker.db.session import get_db_session, get_log_session_factory

router = APIRouter()
logger = structlog.get_logger()
settings = get_settings()


async def get_ai_service(
    db: AsyncSession = Depends(get_db_session),
    log_session_factory: async_sessionmaker[AsyncSession] = Depends(get_log_session_factory),
) -> AIService:
    """Request-scoped AI service."""
    return AIService(db, settings=settings, log_session_factory=log_session_factory)


# =============================================================================
# Breakdown
# =============================================================================


@router.post("/breakdown", response_model=BreakdownResponse)
async def breakdown_task(
    request: BreakdownRequest,
    ai_service: AIService = Depends(get_ai_service),
) -> BreakdownResponse:
    """Suggest 3-7 subtasks for a task label."""
    try:
        subtasks = await ai_service.breakdown(
            task_label=request.task_label,
            context=request.context,
            api_key=request.api_key,
            provider=request.provider,
            project_id=request.project_id,
            enable_logging=request.enable_logging,
        )
    except Exception as e:
        raise handle_service_error(e, "Failed to break down task")
    return BreakdownResponse(subtasks=subtasks)


# =============================================================================
# Model Discovery
# =============================================================================


@router.post("/models", response_model=ModelsResponse)
async def list_models(
    request: ModelsRequest,
    ai_service: AIService = Depends(get_ai_service),
) -> ModelsResponse:
    """List a provider's models after the curated relevance filter."""
    try:
        result = await ai_service.list_models(
            provider=request.provider,
            api_key=request.api_key,
            base_url=request.base_url,
        )
    except Exception as e:
        raise handle_service_error(e, "Failed to fetch models")
    return ModelsResponse(**result)


@router.post("/pricing/refresh", response_model=PricingRefreshResponse)
async def refresh_pricing(
    request: PricingRefreshRequest,
    ai_service: AIService = Depends(get_ai_service),
) -> PricingRefreshResponse:
    """Rebuild a provider's price table from its official pricing page."""
    try:
        result = await ai_service.refresh_pricing(
            provider=request.provider,
            api_key=request.api_key,
            ai_provider=request.ai_provider,
            ai_api_key=request.ai_api_key,
            enable_logging=request.enable_logging,
        )
    except Exception as e:
        raise handle_service_error(e, "Failed to refresh pricing")
    return PricingRefreshResponse(**result)


# =============================================================================
# Call Log
# =============================================================================


@router.get("/logs", response_model=list[AILogResponse])
async def list_ai_logs(
    limit: int = Query(call_log.DEFAULT_LOG_LIMIT, ge=1),
    db: AsyncSession = Depends(get_db_session),
) -> list[AILogResponse]:
    """Most recent AI calls first."""
    try:
        logs = await call_log.list_logs(db, limit=limit, max_limit=settings.ai_log_list_max)
    except Exception as e:
        raise handle_service_error(e, "Failed to fetch AI logs")
    return [AILogResponse.model_validate(log) for log in logs]


@router.delete("/logs", response_model=AILogClearResponse)
async def clear_ai_logs(
    db: AsyncSession = Depends(get_db_session),
) -> AILogClearResponse:
    """Delete every AI call log entry."""
    try:
        await call_log.clear_logs(db)
    except Exception as e:
        raise handle_service_error(e, "Failed to clear AI logs")
    return AILogClearResponse(cleared=True)
