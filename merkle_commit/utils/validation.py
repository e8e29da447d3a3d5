"""
Input Validation - checks for caller-supplied tree inputs.

Provides validation for external inputs to prevent:
- Silent index wraparound (negative or oversized leaf indices)
- Unbounded allocation (oversized heights)
- Invalid format attacks on decoded openings

Validators return (is_valid, error_message); callers turn failures into
the matching exception.
"""

from typing import Any, Optional, Tuple


# =============================================================================
# Constants
# =============================================================================

MAX_HASH_SIZE = 64
MAX_LEAF_INDEX = 2**64 - 1


# =============================================================================
# Validation Functions
# =============================================================================


def validate_bytes(
    data: Any,
    name: str,
    expected_length: Optional[int] = None,
    max_length: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate bytes input.

    Args:
        data: Data to validate
        name: Field name for error messages
        expected_length: Exact expected length
        max_length: Maximum allowed length

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        return False, f"{name} must be bytes, got {type(data).__name__}"

    if expected_length is not None and len(data) != expected_length:
        return False, f"{name} must be {expected_length} bytes, got {len(data)}"

    if max_length is not None and len(data) > max_length:
        return False, f"{name} exceeds max length {max_length}, got {len(data)}"

    return True, ""


def validate_hash(hash_value: Any, name: str = "hash", size: int = 32) -> Tuple[bool, str]:
    """Validate a digest of a known size."""
    if size > MAX_HASH_SIZE:
        return False, f"{name} size {size} exceeds {MAX_HASH_SIZE}"
    return validate_bytes(hash_value, name, expected_length=size)


def validate_integer(
    value: Any,
    name: str,
    min_val: int = 0,
    max_val: int = MAX_LEAF_INDEX,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Booleans are rejected even though they subclass int.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_leaf_index(index: Any, capacity: int) -> Tuple[bool, str]:
    """Validate a leaf index against a tree capacity."""
    return validate_integer(index, "index", 0, capacity - 1)


def validate_height(height: Any, max_height: int) -> Tuple[bool, str]:
    """Validate a tree height against the configured bound."""
    return validate_integer(height, "height", 0, max_height)


def validate_hex_string(value: Any, name: str, expected_bytes: Optional[int] = None) -> Tuple[bool, str]:
    """
    Validate a hex string (with or without 0x prefix).

    Args:
        value: Value to validate
        name: Field name
        expected_bytes: Expected byte length when decoded

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    hex_str = value[2:] if value[:2] in ("0x", "0X") else value

    if len(hex_str) % 2 != 0:
        return False, f"{name} has odd length, invalid hex"

    try:
        bytes.fromhex(hex_str)
    except ValueError:
        return False, f"{name} contains invalid hex characters"

    if expected_bytes is not None:
        actual_bytes = len(hex_str) // 2
        if actual_bytes != expected_bytes:
            return False, f"{name} must be {expected_bytes} bytes, got {actual_bytes}"

    return True, ""


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "validate_bytes",
    "validate_hash",
    "validate_integer",
    "validate_leaf_index",
    "validate_height",
    "validate_hex_string",
    "MAX_HASH_SIZE",
    "MAX_LEAF_INDEX",
]
