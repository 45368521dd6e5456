"""Courts app package.

Holds the bookable resources (courts), the per-day-type time slot
catalog with its pricing, and the two blocking policies consulted by the
availability engine: globally blocked dates and recurring group-play
sessions.
"""
