"""Room domain services: store, per-room exclusion, lifecycle, turns,
voting and the delayed turn rotation.

Imported by HTTP routes and socket handlers alike, keeping transport
concerns separated from the room state machine.
"""
