"""Portable polynomial evaluation."""

from typing import List, Sequence

from .._dispatch import register_portable
from ._common import as_floats, horner


@register_portable("poly_eval")
def poly_eval(coeffs: Sequence[float], x: Sequence[float]) -> List[float]:
    c = as_floats(coeffs)
    return [horner(c, xi) for xi in as_floats(x)]
