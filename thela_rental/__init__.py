"""Thela Rental Manager: track pushcart rentals, rent collection and due-date reminders."""

__version__ = "1.0.0"
