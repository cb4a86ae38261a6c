"""Delete container registry tags according to retention rules."""

__version__ = "0.1.0"
