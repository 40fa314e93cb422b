"""API Layer — FastAPI routes, dependencies, and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Errors leave as structured JSON envelopes (the empty /records 404 is the one exception)

Design Decisions:
    - Thin routes delegate to the retrieval pipeline (ADR: imperative shell around the pipeline)
"""
