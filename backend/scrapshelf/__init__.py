"""Scrapshelf Application Package: bookmark organizer with a typed RPC layer.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
