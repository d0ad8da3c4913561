"""Uniform Build -- generates uniform Flask + React projects from a few answers."""

__version__ = "1.0.0"
