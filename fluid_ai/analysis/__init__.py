"""Fluidity analysis: adjustments, oracle adapter, normalization and ranking."""

from fluid_ai.analysis.adjustments import FluiditySettings, sanitize
from fluid_ai.analysis.normalizer import fallback_layer_map, normalize
from fluid_ai.analysis.oracle import OracleAdapter, OracleRequest, build_request
from fluid_ai.analysis.pipeline import FluidityPipeline
from fluid_ai.analysis.ranking import apply_adjustments_and_rank, clip, rank

__all__ = [
    "FluiditySettings",
    "sanitize",
    "fallback_layer_map",
    "normalize",
    "OracleAdapter",
    "OracleRequest",
    "build_request",
    "FluidityPipeline",
    "apply_adjustments_and_rank",
    "clip",
    "rank",
]
