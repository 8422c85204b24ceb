"""
Particle simulation driven by fingertip targets and the active theme.

State:
- store: ParticleStore (positions in canvas pixels)
- scale: ScaleContext (canvas size + device pixel ratio, fixed until resize)
- targets / skeleton: this frame's hand points

Per frame:
- forces from the interaction field
- life decay + respawn near a fingertip (or anywhere, with no hands)
- velocity damping (STRUCTURE settles fast, STARDUST floats)
- integrate, then toroidal wrap
"""

from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from interaction import compute_forces
from params import _pget
from particles import ParticleStore

LIFE_DECAY = 0.05          # life units per ms
STRUCTURE_DAMPING = 0.92
STARDUST_DAMPING = 0.98
RESPAWN_JITTER = 50.0


@dataclass(frozen=True)
class ScaleContext:
    """Canvas size in physical pixels + the dpr every pixel constant scales by."""
    width: float
    height: float
    dpr: float = 1.0

    @classmethod
    def from_logical(cls, width, height, dpr=1.0):
        dpr = float(dpr) if dpr and dpr > 0 else 1.0
        return cls(width=float(width) * dpr, height=float(height) * dpr, dpr=dpr)


def step(store, forces, dt_ms, targets=None, rng=None):
    """
    Advance every particle in `store` by one frame (in place).
    Bounds and scale are the ones the store was initialized with.
    """
    rng = rng if rng is not None else store.rng
    scale = store.scale

    # --- Life / respawn ---
    store.life -= max(0.0, float(dt_ms)) * LIFE_DECAY
    dead = np.flatnonzero(store.life <= 0.0)
    if dead.size:
        store.life[dead] = store.max_life[dead]
        has_targets = targets is not None and len(targets) > 0
        if has_targets:
            tg = np.asarray(targets, dtype=np.float64).reshape(-1, 2)
            src = tg[rng.integers(0, tg.shape[0], size=dead.size)]
            store.pos[dead] = src + (rng.random((dead.size, 2)) - 0.5) * RESPAWN_JITTER * scale
        else:
            store.pos[dead] = rng.random((dead.size, 2)) * [store.width, store.height]
        speed = store.respawn_speed(dead, near_target=has_targets)
        store.vel[dead] = (rng.random((dead.size, 2)) - 0.5) * speed[:, None] * scale

    # --- Force + damping ---
    store.vel += forces
    damping = np.where(store.is_structure, STRUCTURE_DAMPING, STARDUST_DAMPING)
    store.vel *= damping[:, None]

    # --- Integrate ---
    store.pos += store.vel

    # --- Boundaries (wrap) ---
    store.pos = store.wrap(store.pos)


class Simulation:
    def __init__(self, params=None, rng=None):
        self.params = params
        self.rng = rng if rng is not None else np.random.default_rng()

        self.scale = ScaleContext.from_logical(
            _pget(params, "width", 960),
            _pget(params, "height", 540),
            _pget(params, "dpr", 1.0),
        )
        self.store = None

        # Hand input (set each frame)
        self.targets = []
        self.skeleton = []

        self.reset()

    def reset(self):
        self.resize_physical(self.scale)

    def resize(self, width, height, dpr=1.0):
        """Logical size change: rebuild the whole particle store for the new canvas."""
        self.resize_physical(ScaleContext.from_logical(width, height, dpr))

    def resize_physical(self, scale):
        store = ParticleStore(self.params, rng=self.rng)
        store.initialize(scale.width, scale.height, scale.dpr)
        # swap both together; nothing reads a half-resized context
        self.scale, self.store = scale, store

    def set_hand_input(self, targets, skeleton):
        self.targets = list(targets)
        self.skeleton = list(skeleton)

    def step(self, theme, dt_ms, t_ms):
        forces = compute_forces(self.store, self.targets, theme, self.scale.dpr, t_ms, rng=self.rng)
        step(self.store, forces, dt_ms, self.targets, rng=self.rng)
