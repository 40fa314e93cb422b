"""Services Layer — the retrieval pipeline and its request coalescing.

Invariants:
    - Services depend on core Protocols only, never on infrastructure classes
"""
