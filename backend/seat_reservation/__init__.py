"""Seat reservation service: conflict-free seat booking under concurrent load."""

__version__ = "1.0.0"
