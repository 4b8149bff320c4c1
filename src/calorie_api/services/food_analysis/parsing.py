"""Best-effort parsing of model replies into AnalysisResult."""

import json
import logging
import math
import re
from typing import Any

from calorie_api.models.analysis import AnalysisResult

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Unknown Food"
DEFAULT_CALORIES = 300
DEFAULT_ANALYSIS = "Unable to analyze food item"

# Greedy: first "{" through last "}" in the reply
JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


def extract_json_object(text: str) -> dict[str, Any] | None:
    """
    Extract the brace-delimited JSON object embedded in a reply.

    Returns:
        The parsed object, or None if there is no match, it does not parse,
        or it is not a JSON object
    """
    match = JSON_OBJECT_PATTERN.search(text)
    if not match:
        return None

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse JSON from model reply: {e}")
        return None

    return data if isinstance(data, dict) else None


def coerce_calories(value: Any) -> int:
    """Turn a model-supplied calorie value into a non-negative int, else the default."""
    if isinstance(value, bool) or value is None:
        return DEFAULT_CALORIES

    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return DEFAULT_CALORIES

    if not isinstance(value, (int, float)):
        return DEFAULT_CALORIES
    if isinstance(value, float) and not math.isfinite(value):
        return DEFAULT_CALORIES

    calories = int(round(value))
    return calories if calories > 0 else DEFAULT_CALORIES


def _text_or_default(value: Any, default: str) -> str:
    if value is None:
        return default
    text = value if isinstance(value, str) else str(value)
    return text if text.strip() else default


def parse_analysis(content: str) -> AnalysisResult:
    """
    Normalize a model reply into an AnalysisResult.

    When no JSON object can be recovered, the first non-empty line becomes
    the name, calories default to 300 and the whole reply is the analysis.
    Missing or empty fields always fall back to their defaults.
    """
    data = extract_json_object(content)

    if data is None:
        logger.info("No JSON object in model reply, using text fallback")
        lines = [line.strip() for line in content.splitlines() if line.strip()]
        data = {
            "name": lines[0] if lines else None,
            "calories": DEFAULT_CALORIES,
            "analysis": content,
        }

    return AnalysisResult(
        name=_text_or_default(data.get("name"), DEFAULT_NAME),
        calories=coerce_calories(data.get("calories")),
        analysis=_text_or_default(data.get("analysis"), DEFAULT_ANALYSIS),
    )
