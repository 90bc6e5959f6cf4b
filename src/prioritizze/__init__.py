"""Prioritizze recurring task reset service."""

__version__ = "0.1.0"
