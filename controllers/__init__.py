"""
Command controllers for the model asset manager.
"""

from .result import OperationResult
from .tokenizer import add_tokenizers, remove_tokenizers, update_tokenizers
from .tidy import TidyReport, tidy
from .model import add_models, remove_models, remove_all_models

__all__ = [
    "OperationResult",
    "add_tokenizers",
    "remove_tokenizers",
    "update_tokenizers",
    "TidyReport",
    "tidy",
    "add_models",
    "remove_models",
    "remove_all_models"
]
