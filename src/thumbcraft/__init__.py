"""Thumbcraft - AI-assisted thumbnail generation service."""

__version__ = "0.1.0"
