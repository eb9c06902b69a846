"""AI call logging.

Invocations are recorded in their own session so that a failed call still
leaves a row behind after the request transaction rolls back.
"""

import time
from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasker.ai.providers.base import AIProvider
from tasker.exceptions import TaskerError
from tasker.models.ai import AILog

logger = structlog.get_logger()

DEFAULT_LOG_LIMIT = 50


class AICallLogger:
    """Runs provider calls and appends an ``ai_logs`` row when enabled."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def generate(
        self,
        provider: AIProvider,
        endpoint: str,
        prompt: str,
        enabled: bool = False,
    ) -> str:
        """Call ``provider.generate`` and return the text.

        Errors propagate unchanged; with ``enabled`` the outcome is logged
        either way.
        """
        start_time = time.perf_counter()
        response: Optional[str] = None
        error: Optional[str] = None

        try:
            result = await provider.generate(prompt)
            response = result.content
            return response
        except TaskerError as e:
            error = e.message
            raise
        except Exception as e:
            error = str(e)
            raise
        finally:
            if enabled:
                await self.record(
                    provider=provider.name,
                    model=provider.model,
                    endpoint=endpoint,
                    prompt=prompt,
                    response=response,
                    error=error,
                    duration_ms=int((time.perf_counter() - start_time) * 1000),
                )

    async def record(
        self,
        *,
        provider: str,
        model: Optional[str],
        endpoint: str,
        prompt: str,
        response: Optional[str],
        error: Optional[str],
        duration_ms: int,
    ) -> None:
        """Insert one log row. Write failures are logged, never raised."""
        try:
            async with self.session_factory() as session:
                session.add(
                    AILog(
                        provider=provider,
                        model=model,
                        endpoint=endpoint,
                        prompt=prompt,
                        response=response,
                        error=error,
                        duration_ms=duration_ms,
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to write AI log", provider=provider, endpoint=endpoint, error=str(e))


async def list_logs(db: AsyncSession, limit: int = DEFAULT_LOG_LIMIT, max_limit: int = 200) -> list[AILog]:
    """Most recent log rows first, at most ``max_limit``."""
    limit = min(limit if limit and limit > 0 else DEFAULT_LOG_LIMIT, max_limit)
    result = await db.execute(select(AILog).order_by(AILog.id.desc()).limit(limit))
    return list(result.scalars().all())


async def clear_logs(db: AsyncSession) -> int:
    """Delete every log row; returns how many were removed."""
    result = await db.execute(delete(AILog))
    await db.commit()
    logger.info("ai_logs_cleared", count=result.rowcount)
    return result.rowcount
