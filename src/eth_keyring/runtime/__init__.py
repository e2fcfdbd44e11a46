"""
Runtime support: error model and address helpers.
"""

from .errors import *
from .address import (
    strip_hex_prefix,
    add_hex_prefix,
    normalize_address,
    normalize_addresses,
    is_hex_string,
)
