"""Recurring app package.

Weekly recurring reservations: a group record owning one booking per
planned date, the planner that decides which dates can be booked, and
the bulk payment kept on the group.
"""
