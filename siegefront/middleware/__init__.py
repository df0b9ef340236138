"""
Middleware package for the Siegefront API.
"""
from .error_handler import setup_error_handlers, validation_details

__all__ = [
    "setup_error_handlers",
    "validation_details",
]
