"""Oracle response normalization.

``normalize`` always returns a complete layer map. Output that cannot be
parsed into all four layers is replaced by a fixed fallback map.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

import structlog

from fluid_ai.core.models import LAYER_KEYS, LayerKey, LayerMap, LayerResult

logger = structlog.get_logger(__name__)

_OPENING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?```$")

FALLBACK_FLUIDITY: dict[LayerKey, float] = {
    LayerKey.MEANING: 0.7,
    LayerKey.EMOTION: 0.6,
    LayerKey.LOGIC: 0.75,
    LayerKey.CONTEXT: 0.65,
}

FALLBACK_CONTENT: dict[LayerKey, str] = {
    LayerKey.MEANING: 'Analyzed the meaning of "{user_input}"',
    LayerKey.EMOTION: "Detected the emotional aspects",
    LayerKey.LOGIC: "Parsed the logical structure",
    LayerKey.CONTEXT: "Understood the context",
}


class MalformedOracleOutput(ValueError):
    """Raised internally when oracle output is not a valid layer map."""


def strip_code_fences(raw_text: str) -> str:
    """Remove surrounding markdown code fences and whitespace."""
    text = raw_text.strip()
    text = _OPENING_FENCE.sub("", text, count=1)
    text = _CLOSING_FENCE.sub("", text, count=1)
    return text.strip()


def coerce_fluidity(value: Any) -> float:
    """Parse a fluidity value into a float clipped to [0, 1].

    Numbers and numeric strings are accepted; anything else, and any
    non-finite value, is malformed.
    """
    if isinstance(value, bool):
        raise MalformedOracleOutput(f"fluidity is not numeric: {value!r}")
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError as e:
            raise MalformedOracleOutput(f"fluidity is out of float range: {value!r}") from e
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError as e:
            raise MalformedOracleOutput(f"fluidity is not numeric: {value!r}") from e
    else:
        raise MalformedOracleOutput(f"fluidity is not numeric: {value!r}")

    if not math.isfinite(number):
        raise MalformedOracleOutput(f"fluidity is not finite: {value!r}")
    return min(1.0, max(0.0, number))


def _coerce_layer(layer: LayerKey, value: Any) -> LayerResult:
    if not isinstance(value, dict):
        raise MalformedOracleOutput(f"layer {layer.value} is not an object")
    if "fluidity" not in value:
        raise MalformedOracleOutput(f"layer {layer.value} has no fluidity")

    content = value.get("content", "")
    if content is None:
        content = ""
    elif not isinstance(content, str):
        content = str(content)

    return LayerResult(content=content, fluidity=coerce_fluidity(value["fluidity"]))


def parse_layer_map(raw_text: str) -> LayerMap:
    """Strictly parse oracle output into a layer map.

    Raises:
        MalformedOracleOutput: The text is not a JSON object holding all
            four layers with numeric fluidity.
    """
    text = strip_code_fences(raw_text)
    try:
        decoded = json.loads(text)
    except ValueError as e:
        # JSONDecodeError, or an integer past the int string conversion limit
        raise MalformedOracleOutput(f"not valid JSON: {e}") from e

    if not isinstance(decoded, dict):
        raise MalformedOracleOutput("top-level JSON value is not an object")

    missing = [layer.value for layer in LAYER_KEYS if layer.value not in decoded]
    if missing:
        raise MalformedOracleOutput(f"missing layers: {', '.join(missing)}")

    return {layer: _coerce_layer(layer, decoded[layer.value]) for layer in LAYER_KEYS}


def fallback_layer_map(user_input: str) -> LayerMap:
    """The fixed layer map used when oracle output cannot be parsed."""
    return {
        layer: LayerResult(
            content=FALLBACK_CONTENT[layer].format(user_input=user_input),
            fluidity=FALLBACK_FLUIDITY[layer],
        )
        for layer in LAYER_KEYS
    }


def normalize(raw_text: str, user_input: str) -> LayerMap:
    """Parse oracle output, falling back to a fixed map on any failure."""
    try:
        return parse_layer_map(raw_text)
    except MalformedOracleOutput as e:
        logger.warning(
            "Oracle output malformed, using fallback layer map",
            reason=str(e),
            response_text=raw_text,
        )
        return fallback_layer_map(user_input)


def is_fallback(layer_map: LayerMap, user_input: str) -> bool:
    """True if ``layer_map`` is the fallback map for ``user_input``."""
    return layer_map == fallback_layer_map(user_input)
