"""Utility modules for ucdstore."""
