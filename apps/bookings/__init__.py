"""Bookings app package.

Single court reservations at half-hour granularity. Availability is
derived from the live slot catalog, and every occupied half-unit is also
claimed in a uniquely constrained table so that two concurrent writers
can never both hold the same court time.
"""
