"""Infrastructure Layer — tier adapters (SQL, Redis, HTTP) and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/
    - All tier failures mapped to typed errors from core/errors.py

Design Decisions:
    - Resilient wrappers over raw clients (ADR: single responsibility)
"""
