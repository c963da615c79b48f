"""
FluidAI - fluid self-optimizing analysis.

Decomposes free text into four fixed layers (meaning, emotion, logic,
context) with the help of an LLM, scores each layer's fluidity, applies the
user's per-layer adjustments and ranks the layers.
"""

__version__ = "0.1.0"
__author__ = "FluidAI Team"
