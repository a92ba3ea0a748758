"""Bulk delete Google Calendar events across calendars."""

__version__ = "1.0.0"
