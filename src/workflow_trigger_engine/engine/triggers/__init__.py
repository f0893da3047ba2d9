"""Trigger binding and provider-configuration domain.

This package introduces first-class types for:
- Bindings from event payload paths or literals onto workflow inputs
- Schema-driven provider configuration
- Trigger classification
- Reconciliation of drafts and subscriptions into save payloads
"""

__all__: list[str] = []
