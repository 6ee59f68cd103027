"""Recipe and ingredient catalog persistence."""

__version__ = "0.1.0"
