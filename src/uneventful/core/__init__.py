"""Configuration, errors, credentials and HTTP plumbing."""
