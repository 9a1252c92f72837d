"""Collision probability estimation.

Estimates the probability of collision (Pc) between two objects from their
relative position and position covariances in the Radial-Intrack-Crosstrack
(RIC) frame. All distance inputs must share one unit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from satcore.core.vector import cholesky, matrix_scale
from satcore.utils.constants import DEFAULT_MC_SAMPLES, DEFAULT_MC_SEED, MC_BATCH_SIZE

logger = logging.getLogger(__name__)


class PcMethod(Enum):
    """Collision probability calculation methods."""

    MONTE_CARLO = "monte_carlo"
    ISOTROPIC = "isotropic"


@dataclass(frozen=True)
class CollisionQuery:
    """Inputs to a collision probability estimate.

    Attributes:
        relative_position_km: Position of object A relative to object B.
        covariance_a: 3x3 RIC position covariance of object A.
        covariance_b: 3x3 RIC position covariance of object B.
        hard_body_radius_km: Combined radius of both objects.
        sigma_scale: Multiplier applied to both covariances.
        sample_count: Number of Monte-Carlo trials.
    """

    relative_position_km: NDArray[np.float64]
    covariance_a: NDArray[np.float64]
    covariance_b: NDArray[np.float64]
    hard_body_radius_km: float
    sigma_scale: float = 1.0
    sample_count: int = DEFAULT_MC_SAMPLES

    def __post_init__(self) -> None:
        rel = np.array(self.relative_position_km, dtype=np.float64)
        if rel.shape != (3,):
            raise ValueError(f"relative_position_km must have shape (3,), got {rel.shape}")
        object.__setattr__(self, "relative_position_km", rel)
        for name in ("covariance_a", "covariance_b"):
            cov = np.array(getattr(self, name), dtype=np.float64)
            if cov.shape != (3, 3):
                raise ValueError(f"{name} must have shape (3, 3), got {cov.shape}")
            object.__setattr__(self, name, cov)
        if self.hard_body_radius_km < 0:
            raise ValueError(f"hard_body_radius_km must be non-negative, got {self.hard_body_radius_km}")
        if self.sigma_scale <= 0:
            raise ValueError(f"sigma_scale must be positive, got {self.sigma_scale}")
        if self.sample_count <= 0:
            raise ValueError(f"sample_count must be positive, got {self.sample_count}")


@dataclass
class PcResult:
    """Result of a collision probability calculation.

    Attributes:
        probability: Estimated collision probability.
        method: Method used for calculation.
        hard_body_radius_km: Combined hard-body radius.
        hits: Trials within the hard-body radius (for Monte Carlo).
        samples: Number of samples used (for Monte Carlo).
        seed: Generator seed (for Monte Carlo).
    """

    probability: float
    method: PcMethod
    hard_body_radius_km: float
    hits: int | None = None
    samples: int | None = None
    seed: int | None = None


def monte_carlo_pc(
    query: CollisionQuery,
    seed: int = DEFAULT_MC_SEED,
    batch_size: int = MC_BATCH_SIZE,
) -> PcResult:
    """Monte Carlo Pc estimation.

    Each trial perturbs object A about ``relative_position`` and object B about
    the origin with correlated Gaussian noise (Cholesky factor of the scaled
    covariance times a standard-normal draw), and counts a hit when the two
    perturbed positions lie within the hard-body radius.

    A fresh generator is built from ``seed`` on every call, so the result is
    reproducible and concurrent calls share no state.

    Args:
        query: Geometry, covariances and trial count.
        seed: Random seed for reproducibility.
        batch_size: Trials drawn per vectorized batch.

    Returns:
        PcResult with ``probability = hits / sample_count``.

    Raises:
        NotPositiveDefiniteError: If either scaled covariance has no Cholesky
            factor.
    """
    factor_a = cholesky(matrix_scale(query.covariance_a, query.sigma_scale))
    factor_b = cholesky(matrix_scale(query.covariance_b, query.sigma_scale))
    rng = np.random.default_rng(seed)

    hits = 0
    remaining = query.sample_count
    while remaining > 0:
        n = min(batch_size, remaining)
        perturbed_a = query.relative_position_km + rng.standard_normal((n, 3)) @ factor_a.T
        perturbed_b = rng.standard_normal((n, 3)) @ factor_b.T
        separation = np.linalg.norm(perturbed_a - perturbed_b, axis=1)
        hits += int(np.count_nonzero(separation <= query.hard_body_radius_km))
        remaining -= n

    probability = hits / query.sample_count
    logger.debug("Monte Carlo Pc: %d/%d hits (seed=%d), Pc=%.3e",
                 hits, query.sample_count, seed, probability)
    return PcResult(
        probability=probability,
        method=PcMethod.MONTE_CARLO,
        hard_body_radius_km=query.hard_body_radius_km,
        hits=hits,
        samples=query.sample_count,
        seed=seed,
    )


def isotropic_pc(query: CollisionQuery) -> PcResult:
    """Closed-form Pc when the combined covariance is isotropic.

    With combined covariance ``σ²I`` the separation is a scaled non-central
    chi distribution with 3 degrees of freedom, so

        Pc = F_χ²(R²/σ²; k=3, λ=|d|²/σ²)

    Args:
        query: Geometry and covariances; ``sample_count`` is ignored.

    Returns:
        PcResult with the analytic probability.

    Raises:
        ValueError: If the combined covariance is not a positive multiple of
            the identity.
    """
    combined = matrix_scale(query.covariance_a + query.covariance_b, query.sigma_scale)
    variance = float(combined[0, 0])
    if variance <= 0 or not np.allclose(combined, variance * np.eye(3), rtol=1e-9, atol=0.0):
        raise ValueError("isotropic_pc requires a combined covariance proportional to the identity")

    limit = query.hard_body_radius_km ** 2 / variance
    noncentrality = float(query.relative_position_km @ query.relative_position_km) / variance
    if noncentrality == 0.0:
        probability = float(stats.chi2.cdf(limit, df=3))
    else:
        probability = float(stats.ncx2.cdf(limit, df=3, nc=noncentrality))

    logger.debug("Isotropic Pc=%.3e (sigma=%.3f)", probability, np.sqrt(variance))
    return PcResult(
        probability=float(np.clip(probability, 0.0, 1.0)),
        method=PcMethod.ISOTROPIC,
        hard_body_radius_km=query.hard_body_radius_km,
    )


def collision_probability(
    query: CollisionQuery,
    method: PcMethod = PcMethod.MONTE_CARLO,
    seed: int = DEFAULT_MC_SEED,
) -> PcResult:
    """Main entry point. Compute collision probability.

    Args:
        query: Geometry, covariances and trial count.
        method: Calculation method.
        seed: Random seed (Monte Carlo only).

    Returns:
        PcResult with collision probability and metadata.
    """
    if method == PcMethod.MONTE_CARLO:
        return monte_carlo_pc(query, seed=seed)
    elif method == PcMethod.ISOTROPIC:
        return isotropic_pc(query)
    else:
        raise ValueError(f"Unknown method: {method}")
