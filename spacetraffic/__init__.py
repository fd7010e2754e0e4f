"""Space Traffic Model: SGP4 propagation and a cached Celestrak catalog."""

__version__ = "1.0.0"
