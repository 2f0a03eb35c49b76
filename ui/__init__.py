"""
User interface module for the model asset manager.
"""

from .console import UI, ConsoleUI

__all__ = ["UI", "ConsoleUI"]
