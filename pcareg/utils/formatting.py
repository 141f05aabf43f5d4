"""
pcareg Value Formatting

Text conversion of parameter values for logging and configuration echo.

Booleans are written as "false"/"true" (parameter files use these words,
not 0/1). Integers are exact. Floating point values use the shortest text
that reads back to the same value, so 0.5 is "0.5" and 0.0 is "0".
Composite values (sizes, indices, points, vectors, matrices) are flattened
in row-major order into one string per component.
"""

import math
from typing import Any, Iterator, List

import numpy as np
import torch

_BOOL_STRINGS = ("false", "true")

# Enough significant digits to round-trip any IEEE double
_MAX_DIGITS = 17


def bool_to_string(value: bool) -> str:
    """Return "true" or "false"."""
    return _BOOL_STRINGS[bool(value)]


def _shortest_float(value, cast) -> str:
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    for precision in range(1, _MAX_DIGITS + 1):
        text = f"{float(value):.{precision}g}"
        if cast(text) == value:
            return text
    return repr(float(value))


def to_string(value: Any) -> str:
    """
    Convert a scalar parameter value to text

    Args:
        value: bool, integer or floating point scalar (Python, numpy or a
            zero-dimensional array/tensor), or a string

    Returns:
        Text representation

    Raises:
        TypeError: If the value is not a supported scalar, or is an extended
            precision float that does not fit in a double
    """
    if isinstance(value, torch.Tensor):
        if value.dim() != 0:
            raise TypeError(f"Expected a scalar tensor, got shape {tuple(value.shape)}")
        value = value.item()
    if isinstance(value, np.ndarray):
        if value.ndim != 0:
            raise TypeError(f"Expected a scalar array, got shape {value.shape}")
        value = value[()]

    # bool must be checked before int, it is a subclass of it
    if isinstance(value, (bool, np.bool_)):
        return bool_to_string(value)
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if isinstance(value, np.floating):
        if np.finfo(value.dtype).bits > 64:
            raise TypeError(f"Extended precision {value.dtype} is not supported, convert to float64 first")
        return _shortest_float(value, type(value))
    if isinstance(value, float):
        return _shortest_float(value, float)
    if isinstance(value, str):
        return value
    raise TypeError(f"Cannot convert value of type {type(value).__name__} to string")


def _is_scalar(value: Any) -> bool:
    if isinstance(value, (str, bool, int, float, np.generic)):
        return True
    if isinstance(value, np.ndarray):
        return value.ndim == 0
    if isinstance(value, torch.Tensor):
        return value.dim() == 0
    return False


def _flatten(value: Any) -> Iterator[Any]:
    if isinstance(value, torch.Tensor):
        value = value.detach().cpu().numpy()
    if isinstance(value, np.ndarray):
        # ravel keeps numpy scalar types, so float32 stays float32
        yield from value.ravel(order="C")
        return
    for item in value:
        if _is_scalar(item):
            yield item
        else:
            yield from _flatten(item)


def to_vector_of_strings(value: Any) -> List[str]:
    """
    Flatten a fixed-size composite into per-component strings

    Args:
        value: tuple/list (possibly nested), numpy array, torch.Size or tensor

    Returns:
        One string per component, row-major order
    """
    if _is_scalar(value):
        raise TypeError(f"Expected a composite value, got scalar {value!r}")
    return [to_string(item) for item in _flatten(value)]
