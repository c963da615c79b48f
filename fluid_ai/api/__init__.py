"""API server components."""

from fluid_ai.api.client import FluidAPIClient
from fluid_ai.api.server import create_app, run_server
from fluid_ai.api.routes import router

__all__ = ["FluidAPIClient", "create_app", "run_server", "router"]
