"""Route Modules: one file per path namespace.

Invariants:
    - Each module exposes build_router(...) returning an APIRouter with prefix and tags
    - Route groups receive the DocumentStore as an argument; none reaches for a global
    - Routes never build error bodies: they raise app.core.errors types

Design Decisions:
    - Explicit registration in app.main.create_app over auto-discovery
"""
