"""Core utilities: configuration, logging, time, geometry and tokens."""
