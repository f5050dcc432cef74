"""Domain layer: immutable facts published on the event bus.

Everything here is read-only once constructed.
"""
