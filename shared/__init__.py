"""
Shared kernel used by the court, booking and recurring apps.

Errors, domain events, the message bus and the Django unit of work.
"""
