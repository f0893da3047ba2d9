"""Workflow Trigger Engine.

Binds external trigger events onto workflow inputs and authors provider
configuration for workflow triggers:
- binding state derivation and wire serialization
- schema-driven provider configuration with type coercion and validation
- reconciliation of drafts and persisted subscriptions into save payloads
"""

__version__ = "0.1.0"

from workflow_trigger_engine.engine.config import EngineSettings

__all__ = ["__version__", "EngineSettings"]
