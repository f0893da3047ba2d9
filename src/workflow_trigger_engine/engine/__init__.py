"""Trigger binding and provider-configuration engine.

Provides:
- Settings loaded from .env
- Structured logging
- A small CLI surface
- Pure binding/config transformations and the save orchestrator
"""
