"""
Notebox — Middleware Package
==============================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

The request ID is assigned first so the access log line and any exception
handler output for the same request share it.
"""
