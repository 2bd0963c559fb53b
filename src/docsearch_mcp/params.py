"""Lenient parsing of MCP tool arguments.

Some clients send arrays and objects as JSON strings; these helpers accept
either form.
"""

import json
import logging
from typing import Any

from docsearch_mcp.corpus.models import Category

logger = logging.getLogger(__name__)


def parse_keywords(keywords: Any) -> list[str]:
    """Accept a list, a JSON array string, or a single string."""
    if isinstance(keywords, list):
        return [k.strip() for k in keywords if isinstance(k, str) and k.strip()]

    if isinstance(keywords, str):
        trimmed = keywords.strip()

        if trimmed.startswith("[") and trimmed.endswith("]"):
            try:
                parsed = json.loads(trimmed)
            except json.JSONDecodeError as e:
                logger.warning("Failed to parse keywords JSON %r: %s", trimmed, e)
            else:
                if isinstance(parsed, list):
                    return [k.strip() for k in parsed if isinstance(k, str) and k.strip()]

        if trimmed:
            return [trimmed]

    return []


def parse_query(query: Any) -> str:
    if isinstance(query, str):
        return query.strip()
    return ""


def parse_category(category: Any) -> Category | None:
    """Category filter from a tool argument; unknown values mean no filter."""
    if not isinstance(category, str) or not category.strip():
        return None
    parsed = Category.parse(category)
    if parsed is Category.UNKNOWN:
        return None
    return parsed


def clamp_limit(limit: Any, default: int = 5, maximum: int = 10) -> int:
    """Coerce a limit argument into 1..maximum."""
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return default
    return max(1, min(value, maximum))


def log_parameters(tool_name: str, args: dict[str, Any]) -> None:
    """Log received arguments and their types at DEBUG."""
    logger.debug(
        "[%s] Received parameters: %r (types: %s)",
        tool_name,
        args,
        {key: type(value).__name__ for key, value in args.items()},
    )
