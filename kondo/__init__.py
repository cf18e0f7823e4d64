"""Kondo — community sharing, derived-artifact cache and streaks for translated content.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
