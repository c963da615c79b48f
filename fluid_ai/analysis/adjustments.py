"""User fluidity adjustments."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from fluid_ai.core.models import LAYER_KEYS, AdjustmentSet, LayerKey


def _as_delta(value: Any) -> float:
    """Coerce a raw slider value to a finite float, or 0.0."""
    if isinstance(value, bool):
        return 0.0
    try:
        delta = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(delta):
        return 0.0
    return delta


def sanitize(raw_settings: Mapping[Any, Any] | None) -> AdjustmentSet:
    """Drop zero, non-finite and unknown entries from raw adjustment settings.

    Values are not clipped here; clipping happens after the delta has been
    added to a layer's fluidity.
    """
    adjustments: AdjustmentSet = {}
    if not raw_settings:
        return adjustments

    for key, value in raw_settings.items():
        layer = LayerKey.parse(key)
        if layer is None:
            continue
        delta = _as_delta(value)
        if delta == 0.0:
            continue
        adjustments[layer] = delta

    return adjustments


class FluiditySettings:
    """Per-layer adjustment sliders.

    Each slider holds a delta in ``[-limit, +limit]`` snapped to ``step``.
    """

    def __init__(self, limit: float = 0.3, step: float = 0.01) -> None:
        self.limit = limit
        self.step = step
        self._values: dict[LayerKey, float] = {layer: 0.0 for layer in LAYER_KEYS}

    def set(self, layer: LayerKey | str, value: float) -> float:
        """Move one slider; returns the stored (clamped, snapped) value."""
        key = LayerKey.parse(layer)
        if key is None:
            raise KeyError(f"Unknown layer: {layer}")

        delta = max(-self.limit, min(self.limit, _as_delta(value)))
        snapped = round(round(delta / self.step) * self.step, 2)
        # Snapping can step past the limit when it is not a multiple of step
        snapped = max(-self.limit, min(self.limit, snapped))
        self._values[key] = snapped + 0.0  # -0.0 -> 0.0
        return self._values[key]

    def get(self, layer: LayerKey | str) -> float:
        key = LayerKey.parse(layer)
        if key is None:
            raise KeyError(f"Unknown layer: {layer}")
        return self._values[key]

    def reset(self) -> None:
        """Return every slider to zero."""
        for layer in LAYER_KEYS:
            self._values[layer] = 0.0

    def values(self) -> dict[LayerKey, float]:
        return dict(self._values)

    def as_adjustments(self) -> AdjustmentSet:
        """Non-zero sliders as an adjustment set."""
        return sanitize(self._values)

    def describe(self) -> dict[str, str]:
        """Slider labels such as ``+0.10`` or ``-0.05``."""
        return {
            layer.value: f"{'+' if value > 0 else ''}{value:.2f}"
            for layer, value in self._values.items()
        }
