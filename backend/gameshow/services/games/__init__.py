"""Game domain services: rooms, rounds, buzzers, scoring and timers.

This package contains pure(ish) domain logic that is driven by the socket
handlers and HTTP routes, keeping transport concerns separated from core
game mechanics. Everything that changes a session expects its lock to be held.
"""
