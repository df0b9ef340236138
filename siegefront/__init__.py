"""Tasern Siegefront: turn-based tactical card battle simulator."""
__version__ = "0.1.0"
