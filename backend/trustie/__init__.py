"""Trustie: claim verification and trust scoring for AI-generated text."""

__version__ = "0.1.0"
