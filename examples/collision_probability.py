"""Monte Carlo collision probability checked against the isotropic closed form."""

import numpy as np

from satcore import CollisionQuery, PcMethod, collision_probability

query = CollisionQuery(
    relative_position_km=[0.0, 5.0, 0.0],
    covariance_a=np.diag([2.5e5, 2.5e5, 2.5e5]),
    covariance_b=np.diag([1.3e3, 1.3e3, 1.3e3]),
    hard_body_radius_km=35.0,
    sample_count=250_000,
)

sampled = collision_probability(query, PcMethod.MONTE_CARLO, seed=0)
analytic = collision_probability(query, PcMethod.ISOTROPIC)

print(f"Monte Carlo: Pc = {sampled.probability:.3e} ({sampled.hits}/{sampled.samples} hits)")
print(f"Isotropic:   Pc = {analytic.probability:.3e}")
