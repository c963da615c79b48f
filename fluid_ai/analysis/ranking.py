"""Adjustment application and layer ranking."""

from __future__ import annotations

from fluid_ai.core.models import AdjustmentSet, LayerMap, LayerResult, RankedList


def clip(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    """Clamp ``value`` into ``[lower, upper]``."""
    return max(lower, min(upper, value))


def apply_adjustments(layer_map: LayerMap, adjustment: AdjustmentSet) -> LayerMap:
    """Return a copy of ``layer_map`` with each adjusted fluidity clipped to [0, 1].

    Adjustments for layers missing from ``layer_map`` are ignored.
    """
    adjusted: LayerMap = dict(layer_map)
    for layer, delta in adjustment.items():
        result = adjusted.get(layer)
        if result is None:
            continue
        adjusted[layer] = LayerResult(
            content=result.content,
            fluidity=clip(result.fluidity + delta),
        )
    return adjusted


def rank(layer_map: LayerMap) -> RankedList:
    """Order layers by fluidity, highest first; ties keep map order."""
    return tuple(
        sorted(layer_map.items(), key=lambda item: item[1].fluidity, reverse=True)
    )


def apply_adjustments_and_rank(
    layer_map: LayerMap, adjustment: AdjustmentSet
) -> tuple[LayerMap, RankedList]:
    adjusted = apply_adjustments(layer_map, adjustment)
    return adjusted, rank(adjusted)
