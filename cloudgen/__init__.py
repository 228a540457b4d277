"""cloudgen — multi-target project generation."""

__version__ = "0.1.0"
