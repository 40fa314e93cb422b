"""Core Layer — domain types, wire format, errors, and tier contracts. No IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are pure and deterministic; Protocols only declare async IO

Design Decisions:
    - Functional core separated from imperative shell
"""
