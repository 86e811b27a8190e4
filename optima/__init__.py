"""Optima: deadline-aware, revenue-maximizing project scheduling service."""

__version__ = "1.0.0"
