"""canvas chat: branching conversations on an infinite canvas."""

__version__ = "0.1.0"
