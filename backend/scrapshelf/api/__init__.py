"""API Layer: FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Per-call RPC failures live in the batch response; only request-level
      failures reach the global error handlers
"""
