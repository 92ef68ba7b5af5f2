"""API Layer: middleware pipeline, error envelope, and route groups.

Invariants:
    - Route groups are mounted only by app.main.create_app
    - All endpoints return JSON
"""
