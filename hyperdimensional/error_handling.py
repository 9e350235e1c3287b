"""
Error Handling Module for Hyperdimensional

This module defines the exception taxonomy raised by the hypervector algebra and
a small Result type pattern used by the configuration layer, allowing pure
functions to return either successful results or errors without exceptions.
"""

from typing import Any, Tuple, TypeVar, Union

# Type variables for generic functions
T = TypeVar('T')
E = TypeVar('E')

# Result type for functions that might fail
Result = Union[Tuple[T, None], Tuple[None, E]]


class HyperdimensionalError(Exception):
    """Base class for all errors raised by the hyperdimensional package."""


class InvalidDimension(HyperdimensionalError, ValueError):
    """Non-positive dimension, or data that cannot form a 1-D hypervector."""


class InvalidElement(HyperdimensionalError, ValueError):
    """Explicit data holds a value outside a strict variant's domain."""


class DimensionMismatch(HyperdimensionalError, ValueError):
    """Operands of differing length passed to the same operation."""


class VariantMismatch(HyperdimensionalError, TypeError):
    """Operands of differing hypervector kind passed to the same operation."""


class InsufficientInput(HyperdimensionalError, ValueError):
    """An operation or encoder received fewer elements than it requires."""


class UnsupportedMethod(HyperdimensionalError, ValueError):
    """A similarity method outside the known method set was requested."""


class UnsupportedVectorType(HyperdimensionalError, ValueError):
    """An unknown hypervector type tag was requested."""


class ConfigurationError(HyperdimensionalError, ValueError):
    """A configuration document could not be parsed or validated."""


def success(value: T) -> Result[T, Any]:
    """Create a success result."""
    return (value, None)

def error(err: E) -> Result[Any, E]:
    """Create an error result."""
    return (None, err)

def is_success(result: Result[T, E]) -> bool:
    """Check if a result is successful."""
    return result[1] is None

def is_error(result: Result[T, E]) -> bool:
    """Check if a result is an error."""
    return result[1] is not None

def get_value(result: Result[T, E]) -> T:
    """
    Get the value from a successful result.

    Args:
        result: A Result tuple

    Returns:
        The success value

    Raises:
        ValueError: If the result is an error
    """
    if is_error(result):
        raise ValueError(f"Cannot get value from error result: {result[1]}")
    return result[0]

def get_error(result: Result[T, E]) -> E:
    """
    Get the error from an error result.

    Raises:
        ValueError: If the result is a success
    """
    if is_success(result):
        raise ValueError("Cannot get error from success result")
    return result[1]
