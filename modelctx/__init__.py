"""Model Context Protocol client that works over any supplied transport."""

__version__ = "0.1.0"
__all__ = ["client"]