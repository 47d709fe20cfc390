"""
Notes API - Middleware Package
==============================

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [CORS] → Route Handler

    - Request ID: sets the correlation id used by every later log line
    - Access Log: one line per request with status and duration
    - CORS:       Starlette's CORSMiddleware (handles preflight)

Authentication is not a middleware: require_user (auth.py) is a FastAPI
dependency applied only to the routes that need it.
"""
