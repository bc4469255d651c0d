"""Weekly appointment slot proxy over an upstream availability API."""

__version__ = "1.0.0"
