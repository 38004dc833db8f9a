"""WPHub remote site bridge."""

__version__ = "0.1.0"
