"""Provider configuration store: per-provider base URL and model overrides."""

from dataclasses import dataclass

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tasker.ai.exceptions import UnknownProviderError
from tasker.ai.providers import PROVIDERS
from tasker.models.ai import ProviderConfig

logger = structlog.get_logger()


@dataclass(frozen=True)
class ProviderSettings:
    """Resolved overrides for one provider; ``None`` means use the default."""

    provider: str
    base_url: str | None = None
    model: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {"base_url": self.base_url, "model": self.model}


def ensure_known_provider(provider: str) -> str:
    if provider not in PROVIDERS:
        raise UnknownProviderError(provider)
    return provider


class ProviderConfigService:
    """Read and upsert ``provider_configs`` rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_configs(self) -> dict[str, dict[str, str | None]]:
        """All stored overrides keyed by provider name."""
        result = await self.db.execute(select(ProviderConfig).order_by(ProviderConfig.provider))
        return {
            row.provider: {"base_url": row.base_url, "model": row.model}
            for row in result.scalars().all()
        }

    async def resolve(self, provider: str) -> ProviderSettings:
        """Overrides for a provider; a missing row yields empty overrides."""
        ensure_known_provider(provider)
        row = await self.db.get(ProviderConfig, provider)
        if row is None:
            return ProviderSettings(provider=provider)
        return ProviderSettings(provider=provider, base_url=row.base_url, model=row.model)

    async def upsert(
        self,
        provider: str,
        base_url: str | None = None,
        model: str | None = None,
    ) -> ProviderSettings:
        """Create or replace a provider's overrides; blank values become null."""
        ensure_known_provider(provider)

        try:
            row = await self._write(provider, base_url, model)
        except IntegrityError:
            # A concurrent first save created the row; retry as an update
            await self.db.rollback()
            logger.warning("provider_config_insert_conflict", provider=provider)
            row = await self._write(provider, base_url, model)

        logger.info("provider_config_saved", provider=provider, has_base_url=bool(row.base_url))
        return ProviderSettings(provider=provider, base_url=row.base_url, model=row.model)

    async def _write(self, provider: str, base_url: str | None, model: str | None) -> ProviderConfig:
        row = await self.db.get(ProviderConfig, provider)
        if row is None:
            row = ProviderConfig(provider=provider)
            self.db.add(row)
        row.base_url = base_url or None
        row.model = model or None

        await self.db.commit()
        return row
