"""
Models package for the custom report module.
"""

from .custom_report import CustomReport


__all__ = ["CustomReport"]
