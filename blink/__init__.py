"""Blink — lightweight, source-based package manager."""

__version__ = "0.1.0"
