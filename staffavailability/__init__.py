"""
Staff availability engine for salon scheduling.
"""

__version__ = "0.1.0"
