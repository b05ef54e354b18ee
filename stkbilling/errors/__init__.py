from stkbilling.errors.exceptions import (
    AppError,
    ValidationError,
    ConfigurationError,
    UpstreamError,
    CallbackStructureError,
    LookupMiss,
)

__all__ = [
    'AppError',
    'ValidationError',
    'ConfigurationError',
    'UpstreamError',
    'CallbackStructureError',
    'LookupMiss',
]
