"""Pydantic Schemas: request validation for the route collaborators.

Invariants:
    - Schemas validate at the system boundary (parsed request bodies)
    - Stored documents use camelCase keys, the shape the web client reads
"""
