"""Check-in engine for church attendance sessions."""

__version__ = "0.1.0"
