"""Server package for the Thugs.io game."""

__all__ = [
    "bullet",
    "collision",
    "constants",
    "ids",
    "main",
    "player",
    "police",
    "protocol",
    "utils",
    "wanted",
    "world",
]
