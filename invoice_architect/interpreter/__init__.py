"""
Text Interpreter Module for the Invoice Import Subsystem.

    - TextInterpreter: heuristic plain text -> ImportedInvoice
    - InterpreterSettings: immutable interpreter configuration
    - DateNormalizer, AmountNormalizer: token normalization
"""

from .interpreter import InterpreterSettings, TextInterpreter
from .normalizers import AmountNormalizer, DateNormalizer

__all__ = [
    'AmountNormalizer',
    'DateNormalizer',
    'InterpreterSettings',
    'TextInterpreter',
]
