"""
Notebox — API Routes Package
==============================

Route Inventory:
    - notes.py:   POST /note, GET /note, GET/PUT/DELETE /note/{id}
    - health.py:  GET /health

Routes stay thin: read the request, call the Note Store, shape the envelope.
"""
