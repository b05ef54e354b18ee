"""
Utils Package
Utility functions and helpers
"""

from stkbilling.utils.logger import get_logger, RequestLogger
from stkbilling.utils.phone import normalize_phone
from stkbilling.utils.dates import add_months

__all__ = [
    'get_logger',
    'RequestLogger',
    'normalize_phone',
    'add_months',
]
