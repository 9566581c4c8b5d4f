"""Security and best-practice audit of API gateway configurations."""

__version__ = "0.1.0"
