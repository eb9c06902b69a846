"""Provider settings endpoints (base URL and model overrides, no secrets)."""

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from tasker.api.errors import handle_service_error
from tasker.db.session import get_db_session
from tasker.services.provider_config import ProviderConfigService

router = APIRouter()
logger = structlog.get_logger()


class ProviderConfigUpdate(BaseModel):
    """Overrides for one provider; empty values reset to the default."""

    base_url: str | None = None
    model: str | None = None


class ProviderConfigResponse(BaseModel):
    provider: str
    base_url: str | None = None
    model: str | None = None


@router.get("", response_model=dict[str, ProviderConfigUpdate])
async def list_provider_configs(
    db: AsyncSession = Depends(get_db_session),
) -> dict[str, dict[str, str | None]]:
    """Stored overrides keyed by provider."""
    try:
        return await ProviderConfigService(db).list_configs()
    except Exception as e:
        raise handle_service_error(e, "Failed to fetch settings")


@router.get("/{provider}", response_model=ProviderConfigResponse)
async def get_provider_config(
    provider: str,
    db: AsyncSession = Depends(get_db_session),
) -> ProviderConfigResponse:
    """Overrides for one provider; nulls mean the provider default applies."""
    try:
        config = await ProviderConfigService(db).resolve(provider)
    except Exception as e:
        raise handle_service_error(e, "Failed to fetch settings")
    return ProviderConfigResponse(provider=provider, **config.to_dict())


@router.put("/{provider}", response_model=ProviderConfigResponse)
async def put_provider_config(
    provider: str,
    config_in: ProviderConfigUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ProviderConfigResponse:
    """Create or replace a provider's overrides."""
    try:
        config = await ProviderConfigService(db).upsert(
            provider,
            base_url=config_in.base_url,
            model=config_in.model,
        )
    except Exception as e:
        raise handle_service_error(e, "Failed to save settings")
    return ProviderConfigResponse(provider=provider, **config.to_dict())
