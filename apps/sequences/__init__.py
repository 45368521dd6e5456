"""Sequences app package.

Issues human-readable booking and group codes from durable counters.
Every number comes from a single atomic increment in the database, so
concurrent callers never receive the same value.
"""
