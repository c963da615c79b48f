#!/usr/bin/env python3
"""
FluidAI - fluid self-optimizing analysis

Main entry point for the application.

Usage:
    python main.py chat               # Interactive session
    python main.py analyze "hello"    # One-shot analysis
    python main.py serve              # Start API server

Environment Variables:
    ANTHROPIC_API_KEY       - Anthropic API key
    AI__PRIMARY_PROVIDER    - "anthropic" (default) or "mock"
    LOGGING__LEVEL          - Logging level
    FLUID_AI_CONFIG         - Path to a settings YAML file
"""

from fluid_ai.cli import main


if __name__ == "__main__":
    main()
