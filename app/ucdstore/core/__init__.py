"""Core configuration and path helpers for ucdstore."""
