"""AI provider configuration and call log models."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from tasker.db.base import Base, CreatedAtMixin, utcnow


class ProviderConfig(Base):
    """Per-provider overrides for base URL and model.

    No secrets are stored here; credentials come from the request or from
    the process environment.
    """

    __tablename__ = "provider_configs"

    provider: Mapped[str] = mapped_column(String(50), primary_key=True)
    base_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    model: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ProviderConfig {self.provider}>"


class AILog(Base, CreatedAtMixin):
    """Append-only record of one AI invocation."""

    __tablename__ = "ai_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    model: Mapped[str | None] = mapped_column(Text, nullable=True)
    endpoint: Mapped[str] = mapped_column(String(100), nullable=False)  # breakdown, pricing-refresh
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    response: Mapped[str | None] = mapped_column(Text, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<AILog {self.id} {self.provider}/{self.endpoint}>"
