"""
Clinic Tracker Backend — Application Package
=============================================

What:  REST API for patient accounts, EMR lab profiles, daily nutrition /
       exercise / weight logs, daily reviews, one-time-code verification,
       daily archives and liver-disease index calculation.
How:   Layered the same way throughout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP status codes, path params
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← ownership, archive, diagnosis, auth
    ├─────────────────────────────────────┤
    │   Clinical (pure index formulas)    │  ← no I/O
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
