"""
Ingestion layer — reads backend exports into validated models.

Submodules:
  snapshot  — JSON / CSV loaders for performance records, the action log,
              and the agent → leader map
"""
