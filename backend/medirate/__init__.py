"""
MediRate Admin Backend — Application Package Initializer
=========================================================

What: Marks the `medirate` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend is a thin admin surface over managed services:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Auth (identity + admin policy)  │  ← One gate for every mutating route
    ├─────────────────────────────────────┤
    │   Services (one per collaborator)   │  ← Postgres, blob store, Drive, SMTP, Stripe
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    Routes authenticate, validate shape, call exactly one service method, and
    let the global exception handlers translate failures into status codes.
"""

__version__ = "1.0.0"
