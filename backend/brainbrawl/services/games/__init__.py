"""Game domain services: questions, roster, power-ups, scoring and timers.

This package contains pure(ish) domain logic that should be driven by
socket handlers, keeping transport concerns separated from core game
mechanics. Nothing in here imports Flask.
"""
