"""
Security Layer

Input sanitization and validation for client-supplied filenames and uploads.
"""

from .sanitization import (
    InputSanitizer,
    SizeLimits,
    ValidationError,
    SizeExceededError,
    PathTraversalError,
    get_sanitizer,
    sanitize_name_component,
    validate_lookup_name,
    ensure_within,
    validate_file_size,
)

__all__ = [
    'InputSanitizer',
    'SizeLimits',
    'ValidationError',
    'SizeExceededError',
    'PathTraversalError',
    'get_sanitizer',
    'sanitize_name_component',
    'validate_lookup_name',
    'ensure_within',
    'validate_file_size',
]
