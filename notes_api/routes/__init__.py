"""
Notes API - Routes Package
==========================

Route Inventory:
    - auth.py:    POST /api/v1/auth/register | login | refresh | logout
    - notes.py:   GET/POST /api/v1/notes, GET/PUT/DELETE /api/v1/notes/{id}
    - files.py:   GET /uploads/{path}
    - health.py:  GET /health

Routes stay thin: read the request, call a service, shape the response.
"""
