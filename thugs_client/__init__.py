"""Headless client package for the Thugs.io game."""

__all__ = [
    "entities",
    "input",
    "main",
    "network",
]
