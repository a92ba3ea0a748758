"""Calendar and event data models."""
