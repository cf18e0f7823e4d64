"""Services Layer — the imperative shell around the pure core.

Invariants:
    - One service class per concern, store and collaborators injected in __init__
    - Business-rule violations returned as KondoError values; provider and
      persistence failures raised
    - Each mutating call is one transaction; provider calls never run inside one
"""
