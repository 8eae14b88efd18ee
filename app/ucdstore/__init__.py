"""ucdstore - Local mirror of Unicode Character Database releases."""

__version__ = "0.1.0"
