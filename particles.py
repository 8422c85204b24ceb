"""
Fixed-size particle store.

State (struct of arrays, index i is one particle):
- pos:      Nx2 canvas pixels
- vel:      Nx2 pixels / frame
- size:     N   pixels
- life:     N   frames-ish, 0 < life <= max_life
- max_life: N
- kind:     N   STRUCTURE or STARDUST

STRUCTURE particles occupy the first `structure_count` slots, STARDUST the rest.
"""

from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from params import _pget
from theme import DEFAULT_THEME

STRUCTURE = 0
STARDUST = 1

KIND_NAMES = {STRUCTURE: "STRUCTURE", STARDUST: "STARDUST"}

# Per-kind tuning: initial speed, respawn-near-target speed, size, life bands
_STRUCTURE_BANDS = dict(speed=0.5, burst=2.0, size0=1.0, size_span=2.0, life=100.0, max_life=(100.0, 150.0))
_STARDUST_BANDS = dict(speed=0.1, burst=0.5, size0=0.0, size_span=1.5, life=200.0, max_life=(200.0, 400.0))


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    size: float
    color: str
    life: float
    max_life: float
    type: str


class ParticleStore:
    def __init__(self, params=None, rng=None):
        self.structure_count = int(_pget(params, "structure_count", 150))
        self.stardust_count = int(_pget(params, "stardust_count", 300))
        self.rng = rng if rng is not None else np.random.default_rng()

        n = self.structure_count + self.stardust_count
        self.kind = np.full(n, STARDUST, dtype=np.int8)
        self.kind[: self.structure_count] = STRUCTURE

        self.width = 0.0
        self.height = 0.0
        self.scale = 1.0
        self.colors = {STRUCTURE: DEFAULT_THEME.primary_color, STARDUST: DEFAULT_THEME.secondary_color}

        self.pos = np.zeros((n, 2), dtype=np.float64)
        self.vel = np.zeros((n, 2), dtype=np.float64)
        self.size = np.zeros(n, dtype=np.float64)
        self.life = np.zeros(n, dtype=np.float64)
        self.max_life = np.zeros(n, dtype=np.float64)

    def __len__(self):
        return int(self.kind.shape[0])

    @property
    def is_structure(self) -> np.ndarray:
        return self.kind == STRUCTURE

    def initialize(self, width, height, scale=1.0):
        """
        Throw away every particle and re-seed over [0,width) x [0,height).
        Velocities and sizes are scaled by `scale` (device pixel ratio).
        """
        self.width = max(1.0, float(width))
        self.height = max(1.0, float(height))
        self.scale = float(scale)

        n = len(self)
        rng = self.rng
        self.pos = rng.random((n, 2)) * np.array([self.width, self.height])
        self.pos = self.wrap(self.pos)

        ns = self.structure_count
        for sl, band in ((slice(0, ns), _STRUCTURE_BANDS), (slice(ns, n), _STARDUST_BANDS)):
            m = sl.stop - sl.start
            self.vel[sl] = (rng.random((m, 2)) - 0.5) * band["speed"] * self.scale
            self.size[sl] = (rng.random(m) * band["size_span"] + band["size0"]) * self.scale
            lo, hi = band["max_life"]
            self.max_life[sl] = lo + rng.random(m) * (hi - lo)
            # (1 - u) keeps life strictly positive
            self.life[sl] = (1.0 - rng.random(m)) * band["life"]

    def wrap(self, pts):
        """Toroidal wrap of Nx2 points into [0,width) x [0,height)."""
        pts = np.mod(pts, [self.width, self.height])
        # np.mod of a tiny negative can round up to the bound itself
        pts[pts[:, 0] >= self.width, 0] = 0.0
        pts[pts[:, 1] >= self.height, 1] = 0.0
        return pts

    def respawn_speed(self, idx, near_target: bool) -> np.ndarray:
        key = "burst" if near_target else "speed"
        return np.where(
            self.kind[idx] == STRUCTURE,
            _STRUCTURE_BANDS[key],
            _STARDUST_BANDS[key],
        )

    def particle(self, i) -> Particle:
        k = int(self.kind[i])
        return Particle(
            x=float(self.pos[i, 0]),
            y=float(self.pos[i, 1]),
            vx=float(self.vel[i, 0]),
            vy=float(self.vel[i, 1]),
            size=float(self.size[i]),
            color=self.colors[k],
            life=float(self.life[i]),
            max_life=float(self.max_life[i]),
            type=KIND_NAMES[k],
        )
