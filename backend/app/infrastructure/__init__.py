"""Infrastructure Layer: Firebase clients and cross-cutting concerns.

Invariants:
    - Only this layer imports firebase_admin / google.cloud
    - SDK exceptions are mapped to app.core.errors before leaving the layer
"""
