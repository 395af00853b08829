"""Beta-PERT variates for three-point (minimum, maximum, most-likely) estimates.

Every uncertain input of the mine model is described by a PERT triple. The
distribution used here is the standard Beta-PERT with shape weight 4, which
gives a bounded, unimodal, possibly skewed distribution whose mean is the
classic three-point estimate ``(min + 4 * mode + max) / 6``.
"""

from dataclasses import dataclass
import math
from typing import Optional, Tuple, Union

import numpy as np
from scipy import stats

from .exceptions import InvalidParameters

#: Weight on the mode in the Beta-PERT parameterisation.
PERT_LAMBDA = 4.0


@dataclass(frozen=True)
class PERTParams:
    """Validated PERT triple.

    Attributes:
        minimum: Lower bound of the support.
        maximum: Upper bound of the support.
        mode: Most-likely value.

    Raises:
        InvalidParameters: If the triple is not ordered, is degenerate
            (``minimum == maximum``) or contains non-finite values.
    """

    minimum: float
    maximum: float
    mode: float

    def __post_init__(self):
        issues = []
        values = (self.minimum, self.maximum, self.mode)
        if not all(math.isfinite(v) for v in values):
            raise InvalidParameters(f"PERT parameters must be finite, got {values}")
        if self.minimum > self.mode:
            issues.append(f"minimum {self.minimum} is greater than mode {self.mode}")
        if self.mode > self.maximum:
            issues.append(f"mode {self.mode} is greater than maximum {self.maximum}")
        if self.minimum == self.maximum:
            issues.append(f"minimum and maximum are both {self.minimum}")
        if issues:
            raise InvalidParameters(issues)

    @classmethod
    def from_tuple(cls, triple: Tuple[float, float, float]) -> "PERTParams":
        """Build from a ``(minimum, maximum, mode)`` tuple."""
        minimum, maximum, mode = triple
        return cls(minimum=float(minimum), maximum=float(maximum), mode=float(mode))

    @property
    def span(self) -> float:
        return self.maximum - self.minimum

    @property
    def shape(self) -> Tuple[float, float]:
        """Beta shape parameters ``(alpha, beta)``."""
        alpha = 1.0 + PERT_LAMBDA * (self.mode - self.minimum) / self.span
        beta = 1.0 + PERT_LAMBDA * (self.maximum - self.mode) / self.span
        return alpha, beta

    def expected_value(self) -> float:
        """Three-point weighted mean."""
        return (self.minimum + PERT_LAMBDA * self.mode + self.maximum) / (PERT_LAMBDA + 2.0)

    def variance(self) -> float:
        """Analytical variance of the scaled Beta."""
        alpha, beta = self.shape
        beta_var = alpha * beta / ((alpha + beta) ** 2 * (alpha + beta + 1.0))
        return beta_var * self.span**2

    def to_scipy(self):
        """Frozen ``scipy.stats.beta`` equivalent, for cdf/ppf and fit tests."""
        alpha, beta = self.shape
        return stats.beta(alpha, beta, loc=self.minimum, scale=self.span)

    def sample(
        self,
        size: Union[int, Tuple[int, ...]],
        rng: Optional[np.random.Generator] = None,
    ) -> np.ndarray:
        """Draw samples of the given size.

        Args:
            size: Number of samples or output shape.
            rng: Random generator to consume. A fresh default generator is
                used when omitted.

        Returns:
            Array of samples in ``[minimum, maximum]``.
        """
        if rng is None:
            rng = np.random.default_rng()
        alpha, beta = self.shape
        return self.minimum + self.span * rng.beta(alpha, beta, size=size)


def sample(
    minimum: float,
    maximum: float,
    mode: float,
    n: int,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Draw ``n`` Beta-PERT variates.

    Args:
        minimum: Lower bound.
        maximum: Upper bound.
        mode: Most-likely value.
        n: Number of samples.
        rng: Random generator; a fresh default generator when omitted.

    Returns:
        One-dimensional array of ``n`` samples.

    Raises:
        InvalidParameters: If the triple is malformed or ``n`` is negative.

    Examples:
        >>> rng = np.random.default_rng(7)
        >>> draws = sample(-100, 500, 100, n=10_000, rng=rng)
        >>> bool(draws.min() >= -100 and draws.max() <= 500)
        True
    """
    if n < 0:
        raise InvalidParameters(f"Sample count must be non-negative, got {n}")
    params = PERTParams(minimum=minimum, maximum=maximum, mode=mode)
    if n == 0:
        return np.array([])
    return params.sample(n, rng)
