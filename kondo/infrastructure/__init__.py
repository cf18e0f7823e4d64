"""Infrastructure Layer — database handle, provider clients and logging setup.

Invariants:
    - Every external failure is mapped to a KondoError subclass before leaving this layer
    - Provider clients never retry (callers decide)

Design Decisions:
    - Thin wrappers over raw clients (ADR: single responsibility, fakeable in tests)
"""
