"""Collaborative-filtering recommendation service for an e-commerce catalog."""

__version__ = "1.0.0"
