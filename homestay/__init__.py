"""
Homestay booking core: room availability, seasonal pricing and the
booking lifecycle.
"""

__version__ = "0.1.0"
