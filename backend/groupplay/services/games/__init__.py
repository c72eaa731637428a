"""Game domain services: session lifecycle, rules and stats.

HTTP routes call into ``sessions``; the per-type move logic lives in
``rules`` and never touches the database.
"""
