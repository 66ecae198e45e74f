"""Pydantic Schemas: procedure input DTOs, response shapes and the RPC envelope.

Invariants:
    - Input DTOs are frozen and forbid unknown fields
    - Schemas validate at the system boundary; handlers never see raw input
"""
