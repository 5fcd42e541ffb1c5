"""API Layer — FastAPI application shell: error handlers and health probes.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses
"""
