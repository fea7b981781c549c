"""
Tally Backend - Application Package Initializer
================================================

What: Marks the `tally` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend follows the same layering for every resource:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   CRUD Service + Core Helpers       │  ← validation, lookups, diffing
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Resources (Variable, DateRecord, Record, Element, ElementInt) differ only
    in their descriptor (see tally.resources); the route and service code is
    shared.
"""

__version__ = "1.0.0"
