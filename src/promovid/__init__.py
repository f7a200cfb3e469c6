"""Promotional video generator: theme content, AI script, Veo video."""

__version__ = "0.1.0"
