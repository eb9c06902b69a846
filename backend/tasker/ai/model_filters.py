"""Curated per-provider rules for which advertised models are worth listing.

The rules track each vendor's naming conventions by hand and need updating
when those conventions change.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Pattern

DATED_SNAPSHOT_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


@dataclass(frozen=True)
class ModelFilterRule:
    """Allow/deny rule for one provider's model identifiers."""

    allowed_prefixes: tuple[str, ...] = ()
    required_pattern: Optional[Pattern[str]] = None
    blocked_substrings: tuple[str, ...] = ()
    rejected_pattern: Optional[Pattern[str]] = None
    strip_prefix: str = ""

    def matches(self, model_id: str) -> bool:
        name = model_id.removeprefix(self.strip_prefix) if self.strip_prefix else model_id

        if self.allowed_prefixes and not name.startswith(self.allowed_prefixes):
            return False
        if self.required_pattern is not None and not self.required_pattern.match(name):
            return False
        if any(blocked in name for blocked in self.blocked_substrings):
            return False
        if self.rejected_pattern is not None and self.rejected_pattern.search(name):
            return False
        return True


MODEL_FILTER_RULES: dict[str, ModelFilterRule] = {
    # Current GPT families only; no dated snapshots, reasoning or media models
    "openai": ModelFilterRule(
        allowed_prefixes=("gpt-5", "gpt-4.1"),
        blocked_substrings=(
            "audio", "realtime", "tts", "image", "transcribe",
            "moderation", "o3", "o4", "o1", "4o",
        ),
        rejected_pattern=DATED_SNAPSHOT_RE,
    ),
    # Versioned names only (gemini-2.5-flash, not gemini-flash-latest)
    "gemini": ModelFilterRule(
        required_pattern=re.compile(r"gemini-\d"),
        blocked_substrings=(
            "embedding", "aqa", "imagen", "veo", "thinking",
            "exp", "image", "native-audio", "customtools",
        ),
        strip_prefix="models/",
    ),
    "anthropic": ModelFilterRule(allowed_prefixes=("claude-",)),
}


def is_relevant_model(model_id: str, provider: str) -> bool:
    """Whether a model id passes the provider's rule; unknown providers pass."""
    rule = MODEL_FILTER_RULES.get(provider)
    if rule is None:
        return True
    return rule.matches(model_id)


def filter_models(model_ids: Iterable[str], provider: str) -> list[str]:
    """Relevant model ids, sorted."""
    return sorted(m for m in model_ids if is_relevant_model(m, provider))
