"""Daily product update digest service"""

__version__ = "1.0.0"
