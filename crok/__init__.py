"""Crok: block-based document editor backend."""

__version__ = "0.1.0"
