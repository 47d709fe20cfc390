"""
Notes API - Application Package
===============================

What: REST backend for a personal notes application with user accounts.
How:  Layered the same way throughout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, cookies, status codes
    ├─────────────────────────────────────┤
    │      Auth gate (require_user)       │  ← access-token cookie verification
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← notes, auth, tokens, files, mail
    ├─────────────────────────────────────┤
    │     Repositories & Models (Data)    │  ← owner-scoped SQLAlchemy queries
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Every collaborator is built by notes_api.main.create_app() and kept on
    app.state, so tests can assemble an isolated application per test.
"""

__version__ = "1.0.0"
