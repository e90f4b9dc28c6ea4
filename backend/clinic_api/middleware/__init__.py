# Middleware package init
"""
Clinic Tracker Backend — Middleware Package
============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [Auth Rate Limit] → [GZip] → [CORS] → Route

    - Request ID runs first so every later log line and error body carries it
    - The access log wraps the limiter, so rejected (429) requests are logged
    - The limiter only counts paths under /api/auth/
"""
