"""Prompt templates for AI features.

Templates are Jinja2 strings rendered with plain variables. Autoescaping is
off, so quotes and markup in task labels or page text pass through as-is.
"""

from typing import Any

from jinja2 import BaseLoader, Environment


# Jinja2 environment for template rendering
_jinja_env = Environment(loader=BaseLoader())


def render_template(template_str: str, variables: dict[str, Any]) -> str:
    """Render a Jinja2 template string with variables.

    Args:
        template_str: Template string with {{ variable }} placeholders
        variables: Variables to substitute

    Returns:
        Rendered string
    """
    template = _jinja_env.from_string(template_str)
    return template.render(**variables)


# =============================================================================
# Task Breakdown
# =============================================================================

TASK_BREAKDOWN = {
    "template_key": "task_breakdown",
    "display_name": "Break Down Task",
    "endpoint": "breakdown",
    "description": "Split a task into 3-7 concrete subtasks",
    "user_prompt_template": """Given a task: "{{ task_label }}"
{%- if context %}
Parent context: "{{ context }}"
{%- endif %}
{%- if project_context %}
Project context: "{{ project_context }}"
{%- endif %}

Break this task into 3-7 specific, actionable subtasks.
Return ONLY a JSON array of strings, nothing else.
Keep subtasks concrete and small enough to complete in one sitting.
Example: ["Set up project structure", "Create database schema", "Build API endpoints"]""",
}


# =============================================================================
# Pricing Extraction
# =============================================================================

PRICING_EXTRACTION = {
    "template_key": "pricing_extraction",
    "display_name": "Extract Model Pricing",
    "endpoint": "pricing-refresh",
    "description": "Extract per-model token prices from fetched pricing page text",
    "user_prompt_template": """You are a pricing data extractor. Below is the text content from {{ provider }}'s official pricing page, and a list of model IDs discovered from their API.

PRICING PAGE CONTENT:
{{ page_text }}

MODEL IDs TO PRICE:
{{ model_ids | join(', ') }}

For each model ID, find its input and output price per 1 million tokens from the page content above.
If a model has variants (e.g. dated versions like "claude-sonnet-4-6-20250514"), use the pricing for the base model.
If you cannot find pricing for a specific model in the page content, omit it.

Return ONLY a JSON object where each key is the model ID and value is { "input": "X.XX", "output": "X.XX" }.
Prices should be strings representing USD per 1M tokens.
No markdown, no explanation, just the JSON object.""",
}
