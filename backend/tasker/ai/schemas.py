"""Pydantic schemas for AI module requests and responses."""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Breakdown
# =============================================================================


class BreakdownRequest(BaseModel):
    """Request to split a task into subtasks."""
    task_label: str
    context: Optional[str] = None
    api_key: Optional[str] = None
    provider: Optional[str] = None
    project_id: Optional[UUID] = None
    enable_logging: bool = False


class BreakdownResponse(BaseModel):
    """Suggested subtask labels, in model order."""
    subtasks: List[str]


# =============================================================================
# Model Discovery
# =============================================================================


class ModelsRequest(BaseModel):
    """Request to list a provider's relevant models."""
    provider: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None


class ModelInfo(BaseModel):
    id: str


class ModelsResponse(BaseModel):
    """Filtered model list plus discovery counters."""
    models: List[ModelInfo]
    total_raw: int
    total_filtered: int


# =============================================================================
# Pricing
# =============================================================================


class PricingRefreshRequest(BaseModel):
    """Request to rebuild the price table for a provider.

    ``ai_provider``/``ai_api_key`` select the model doing the extraction and
    default to the provider being priced.
    """
    provider: str
    api_key: str = Field(..., min_length=1)
    ai_provider: Optional[str] = None
    ai_api_key: Optional[str] = None
    enable_logging: bool = False


class ModelPrice(BaseModel):
    """USD per one million tokens, as strings."""
    provider: str
    input: str
    output: str


class PricingRefreshResponse(BaseModel):
    pricing: Dict[str, ModelPrice] = Field(default_factory=dict)
    models_raw: int
    models_filtered: int
    models_priced: int = 0
    source: Optional[str] = None


# =============================================================================
# Call Log
# =============================================================================


class AILogResponse(BaseModel):
    """One recorded AI invocation."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    provider: str
    model: Optional[str] = None
    endpoint: str
    prompt: str
    response: Optional[str] = None
    error: Optional[str] = None
    duration_ms: Optional[int] = None


class AILogClearResponse(BaseModel):
    cleared: bool = True
