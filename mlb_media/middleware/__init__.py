"""
Middleware package for the MLB media import service.
"""

from .error_handler import ErrorHandlingMiddleware, register_exception_handlers

__all__ = ['ErrorHandlingMiddleware', 'register_exception_handlers']
