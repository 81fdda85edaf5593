"""Booking rule evaluation service for shared venues."""

__version__ = "0.1.0"
