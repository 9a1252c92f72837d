"""Typed errors raised by satcore.

Every error is local and recoverable by the caller: retry with other inputs,
a relaxed tolerance, or a different method. Input-domain errors also derive
from ``ValueError`` so existing ``except ValueError`` handlers keep working.
"""

from __future__ import annotations


class SatcoreError(Exception):
    """Base class for all satcore errors."""


class FrameMismatchError(SatcoreError, ValueError):
    """A value tagged with one reference frame was given to a conversion
    that expects another, or no conversion path exists between two frames."""


class DegenerateVectorError(SatcoreError, ValueError):
    """A zero-magnitude vector was normalized or used as a rotation axis."""


class NotPositiveDefiniteError(SatcoreError, ValueError):
    """Cholesky decomposition precondition violated."""


class OrbitDomainError(SatcoreError, ValueError):
    """Orbital elements outside the closed-ellipse domain (e.g. e >= 1)."""


class NonConvergenceError(SatcoreError, RuntimeError):
    """An iterative solver hit its iteration cap without meeting tolerance.

    Attributes:
        iterations: Number of iterations performed.
        residual: Last absolute step size.
    """

    def __init__(self, message: str, iterations: int, residual: float) -> None:
        super().__init__(message)
        self.iterations = iterations
        self.residual = residual
