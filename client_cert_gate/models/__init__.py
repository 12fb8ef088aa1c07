"""
Data models for the client certificate gate.
"""
from .config import Config, ConfigValidationError, ConfigValidationResult

__all__ = [
    'Config',
    'ConfigValidationError',
    'ConfigValidationResult'
]
