"""Client for the Android monkey automation service."""

__version__ = "0.1.0"
