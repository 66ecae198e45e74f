"""Core Layer: procedure registry, validation, identity and context types.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or models/
    - Nothing in core/ performs IO
"""
