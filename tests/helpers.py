"""Shared test data."""

from __future__ import annotations

import json

HELLO_FLUIDITIES = {
    "meaning": 0.75,
    "emotion": 0.65,
    "logic": 0.80,
    "context": 0.70,
}


def layer_json(fluidities: dict[str, object] | None = None) -> str:
    """Canonical oracle output for the given fluidities."""
    fluidities = fluidities or HELLO_FLUIDITIES
    return json.dumps(
        {
            layer: {"content": f"{layer} analysis", "fluidity": value}
            for layer, value in fluidities.items()
        }
    )
