"""Services Layer: context factory, dispatch, direct caller and procedure handlers.

Invariants:
    - Handlers split by procedure group (feed, scrapBook, todoCategory)
    - Procedure registration uses explicit tuples, no auto-discovery
"""
