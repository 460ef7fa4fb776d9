"""
High-level use cases for the VilaNow API.

Each service orchestrates entity models to implement business rules (register,
express interest, unlock a lead, buy credits, list a property, chat).

Routers (FastAPI endpoints) call these services instead of manipulating the
record stores directly.
"""
