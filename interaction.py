"""
Fingertip force field.

For every particle: find the nearest fingertip target, derive a falloff
`force = 1 - dist / (300 * scale)` and push the particle according to its kind:

- STARDUST: entropy jitter + weak pull, whatever the mode
- STRUCTURE: one behavior per InteractionMode (WEAVE / CRYSTALLIZE / FRAGMENT /
  VOID / RESONANCE); anything unrecognized uses the RESONANCE drift

Without targets everything gets a faint ambient sine drift so the field never
freezes.

All functions are vectorized over the store and return an Nx2 force array.
"""

from __future__ import annotations

import math

import numpy as np

from geometry import _clamp
from theme import DEFAULT_THEME, InteractionMode

INTERACTION_RADIUS = 300.0
FRAGMENT_RADIUS = 200.0


def _knob(value, default, lo, hi):
    v = float(value)
    if not math.isfinite(v):
        v = float(default)
    return _clamp(v, lo, hi)


def _theme_knobs(theme):
    """Tolerate out-of-range or non-finite theme numbers instead of blowing up the frame."""
    tension = _knob(theme.tension, DEFAULT_THEME.tension, 0.1, 2.0)
    entropy = _knob(theme.entropy, DEFAULT_THEME.entropy, 0.0, 1.0)
    geometry = _knob(theme.geometry_scale, DEFAULT_THEME.geometry_scale, 1.0, 1000.0)
    return tension, entropy, geometry


def ambient_drift(pos, scale, t_ms):
    f = np.zeros_like(pos)
    f[:, 0] = np.sin(pos[:, 1] * 0.01 + t_ms * 0.0005) * 0.01 * scale
    return f


def nearest_targets(pos, targets):
    """
    -> (target per particle Nx2, distance N).
    Linear scan; ties resolve to the earliest target.
    """
    tg = np.asarray(targets, dtype=np.float64).reshape(-1, 2)
    diff = tg[None, :, :] - pos[:, None, :]
    d = np.hypot(diff[:, :, 0], diff[:, :, 1])
    idx = np.argmin(d, axis=1)
    rows = np.arange(pos.shape[0])
    return tg[idx], d[rows, idx]


# ---------- STRUCTURE behaviors ----------
# Each takes (pos, d, dist, force, ctx) for the STRUCTURE particles in range
# and returns their Nx2 forces. d = target - pos.

def _weave(pos, d, dist, force, ctx):
    k = force[:, None]
    f = d * 0.02 * ctx["tension"] * k
    curl = np.stack([-d[:, 1], d[:, 0]], axis=1)
    return f + curl * 0.05 * k


def _crystallize(pos, d, dist, force, ctx):
    snap = ctx["geometry"] * ctx["scale"]
    grid = np.round(pos / snap) * snap
    return (grid - pos) * 0.05 + d * 0.005


def _fragment(pos, d, dist, force, ctx):
    inner = (dist < FRAGMENT_RADIUS * ctx["scale"])[:, None]
    return np.where(inner, -d * 0.1 * force[:, None], 0.0)


def _void(pos, d, dist, force, ctx):
    return d * 0.08 * force[:, None]


def _resonance(pos, d, dist, force, ctx):
    t = ctx["t_ms"]
    s = ctx["scale"]
    f = np.empty_like(pos)
    f[:, 0] = np.sin(t * 0.01 + pos[:, 1] * 0.1) * 0.5 * s
    f[:, 1] = np.cos(t * 0.01 + pos[:, 0] * 0.1) * 0.5 * s
    return f


MODE_FORCES = {
    InteractionMode.WEAVE: _weave,
    InteractionMode.CRYSTALLIZE: _crystallize,
    InteractionMode.FRAGMENT: _fragment,
    InteractionMode.VOID: _void,
    InteractionMode.RESONANCE: _resonance,
}


def structure_behavior(mode):
    return MODE_FORCES.get(mode, _resonance)


def compute_forces(store, targets, theme, scale, t_ms, rng=None) -> np.ndarray:
    """Force (fx, fy) for every particle in `store` this frame."""
    pos = store.pos
    if targets is None or len(targets) == 0:
        return ambient_drift(pos, scale, t_ms)

    rng = rng if rng is not None else store.rng
    tension, entropy, geometry = _theme_knobs(theme)

    target, dist = nearest_targets(pos, targets)
    d = target - pos
    radius = INTERACTION_RADIUS * scale
    force = np.maximum(0.0, 1.0 - dist / radius)
    in_range = dist < radius

    out = np.zeros_like(pos)

    dust = in_range & ~store.is_structure
    if np.any(dust):
        m = int(dust.sum())
        jitter = (rng.random((m, 2)) - 0.5) * entropy * scale
        out[dust] = jitter + d[dust] * 0.002 * force[dust][:, None]

    struct = in_range & store.is_structure
    if np.any(struct):
        ctx = {"tension": tension, "geometry": geometry, "scale": scale, "t_ms": t_ms}
        behave = structure_behavior(theme.mode)
        out[struct] = behave(pos[struct], d[struct], dist[struct], force[struct], ctx)

    return out
