"""
Services package for the client certificate gate.
"""
from .config_service import ConfigService
from .logging_service import LoggingService

__all__ = ['ConfigService', 'LoggingService']
