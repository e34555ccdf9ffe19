"""
NoiseSampler — the single source of randomness for projections.

Every stochastic term (life events, reconstructed-history noise) draws from
an injected sampler instead of a global generator, so a fixed seed gives a
reproducible projection and two runs with the same seed see the same draws.

Usage:
    sampler = NoiseSampler(seed=42)
    sampler.random()           # U[0, 1)
    sampler.symmetric(150.0)   # U[-150, 150)
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np


class NoiseSampler:
    def __init__(
        self,
        seed: Optional[int] = 7,
        *,
        rng: Optional[np.random.Generator] = None,
    ):
        self.seed = seed
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def random(self) -> float:
        return float(self.rng.random())

    def uniform(self, low: float, high: float) -> float:
        if high <= low:
            return float(low)
        return float(self.rng.uniform(low, high))

    def symmetric(self, bound: float) -> float:
        """Bounded noise in [-bound, bound)."""
        return self.uniform(-abs(bound), abs(bound))

    def choose(self, weights: Sequence[float], u: Optional[float] = None) -> int:
        """Index drawn with the given (normalised) weights, optionally from a supplied uniform."""
        w = np.asarray(weights, dtype=float)
        cdf = np.cumsum(w / w.sum())
        draw = self.random() if u is None else float(u)
        return int(min(np.searchsorted(cdf, draw, side="right"), len(w) - 1))

    def spawn(self) -> "NoiseSampler":
        """Fresh sampler with the same seed (same stream from the start)."""
        return NoiseSampler(self.seed)
