"""Excel to bulk stamping XML generator."""

__version__ = "0.1.0"
