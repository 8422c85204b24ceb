# renderer.py
# Draws the particle field onto a persistent BGR canvas:
# - faded background (trails)
# - hand skeleton
# - STRUCTURE squares + constellation links between close neighbors
# - STARDUST dots
# Each group of shapes is drawn onto a float layer (premultiplied color +
# coverage alpha) and composited onto the canvas with alpha-over.

from __future__ import annotations
import numpy as np
import cv2

from geometry import _clamp, hex_to_rgba, rgba_to_bgr
from particles import STRUCTURE

BG_LEVEL = 5
FADE_ALPHA = 0.15
SKELETON_ALPHA = 0.1
JOINTS_PER_HAND = 21
LINK_WINDOW = 15       # even particles look at most this far ahead for links
STARDUST_ALPHA = 0.6


def new_canvas(width, height) -> np.ndarray:
    return np.full((int(round(height)), int(round(width)), 3), BG_LEVEL, dtype=np.uint8)


def _ipt(p):
    return (int(round(float(p[0]))), int(round(float(p[1]))))


def fade(canvas):
    # canvas * (1 - a) + bg * a, done with the scalar gamma term
    cv2.addWeighted(canvas, 1.0 - FADE_ALPHA, canvas, 0.0, FADE_ALPHA * BG_LEVEL, dst=canvas)
    return canvas


def particle_alpha(store) -> np.ndarray:
    a = np.minimum(store.life / 50.0, 1.0)
    return np.where(store.kind == STRUCTURE, a, a * STARDUST_ALPHA)


def structure_links(pos, is_structure, max_dist, window=LINK_WINDOW):
    """
    Candidate links for the constellation pass.

    Only even indices scan, and only the next `window - 1` slots after them,
    which caps the work per frame. Returns (i, j, dist) arrays for STRUCTURE
    pairs closer than `max_dist`.
    """
    n = pos.shape[0]
    src = np.flatnonzero(is_structure & (np.arange(n) % 2 == 0))
    out_i, out_j, out_d = [], [], []
    for k in range(1, window):
        j = src + k
        ok = j < n
        i0, j0 = src[ok], j[ok]
        ok = is_structure[j0]
        i0, j0 = i0[ok], j0[ok]
        diff = pos[j0] - pos[i0]
        d = np.hypot(diff[:, 0], diff[:, 1])
        near = d < max_dist
        out_i.append(i0[near])
        out_j.append(j0[near])
        out_d.append(d[near])
    if not out_i:
        empty = np.zeros(0, dtype=np.int64)
        return empty, empty, np.zeros(0)
    return np.concatenate(out_i), np.concatenate(out_j), np.concatenate(out_d)


class Layer:
    """
    One group of shapes: premultiplied BGR + coverage alpha, both float32.

    Shapes inside a group replace each other where they overlap; `over`
    composites the whole group onto the canvas with alpha-over.
    """

    def __init__(self, shape):
        self.color = np.zeros(shape, dtype=np.float32)
        self.alpha = np.zeros(shape[:2], dtype=np.float32)

    def circle(self, center, radius, rgba):
        a = _alpha(rgba)
        cv2.circle(self.color, center, radius, rgba_to_bgr(rgba), -1)
        cv2.circle(self.alpha, center, radius, a, -1)

    def line(self, p0, p1, rgba, thick):
        a = _alpha(rgba)
        cv2.line(self.color, p0, p1, rgba_to_bgr(rgba), thick)
        cv2.line(self.alpha, p0, p1, a, thick)

    def rect(self, p0, p1, rgba):
        a = _alpha(rgba)
        cv2.rectangle(self.color, p0, p1, rgba_to_bgr(rgba), -1)
        cv2.rectangle(self.alpha, p0, p1, a, -1)

    def over(self, canvas):
        # canvas * (1 - a) + premultiplied color
        out = canvas.astype(np.float32)
        out *= 1.0 - self.alpha[:, :, None]
        out += self.color
        np.clip(out + 0.5, 0.0, 255.0, out=out)
        canvas[:] = out.astype(np.uint8)
        return canvas


def _alpha(rgba):
    return _clamp(float(rgba[3]), 0.0, 1.0)


def draw_skeleton(canvas, skeleton, color_hex, dpr):
    if len(skeleton) < 2:
        return canvas
    rgba = hex_to_rgba(color_hex, SKELETON_ALPHA)
    thick = max(1, int(round(1 * dpr)))
    layer = Layer(canvas.shape)
    for i in range(len(skeleton) - 1):
        # last joint of a hand does not connect to the next hand's wrist
        if i % JOINTS_PER_HAND == JOINTS_PER_HAND - 1:
            continue
        layer.line(_ipt(skeleton[i]), _ipt(skeleton[i + 1]), rgba, thick)
    return layer.over(canvas)


def draw_particles(canvas, store, theme, dpr):
    pos = store.pos
    alpha = particle_alpha(store)
    is_struct = store.is_structure

    primary = hex_to_rgba(theme.primary_color, 1.0)[:3]
    secondary = hex_to_rgba(theme.secondary_color, 1.0)[:3]

    # STARDUST: soft dots
    dust = Layer(canvas.shape)
    for i in np.flatnonzero(~is_struct):
        dust.circle(_ipt(pos[i]), int(round(store.size[i])), secondary + (alpha[i] * 0.5,))
    dust.over(canvas)

    # STRUCTURE: constellation links, then the squares on top
    g = float(theme.geometry_scale) * dpr
    if g > 0:
        links = Layer(canvas.shape)
        thick = max(1, int(round(0.5 * dpr)))
        li, lj, ld = structure_links(pos, is_struct, g)
        for i, j, d in zip(li, lj, ld):
            links.line(_ipt(pos[i]), _ipt(pos[j]), primary + (alpha[i] * (1.0 - d / g) * 0.5,), thick)
        links.over(canvas)

    squares = Layer(canvas.shape)
    for i in np.flatnonzero(is_struct):
        x, y = _ipt(pos[i])
        s = max(1, int(round(store.size[i])))
        squares.rect((x, y), (x + s - 1, y + s - 1), primary + (alpha[i],))
    squares.over(canvas)
    return canvas


def render(canvas, store, skeleton, theme, dpr=1.0):
    """Paint one frame into `canvas` (in place) and return it."""
    fade(canvas)
    draw_skeleton(canvas, skeleton, theme.secondary_color, dpr)
    draw_particles(canvas, store, theme, dpr)
    return canvas


def draw_hud(frame, status, theme, fps=None, dpr=1.0):
    """Status + theme readout. Expects a copy of the canvas, not the canvas itself."""
    h = frame.shape[0]
    s = 0.6 * dpr
    gold = (55, 175, 212)  # BGR of #D4AF37
    x0 = int(24 * dpr)
    cv2.putText(frame, "GESTURE FIELD // VISUAL CORE", (x0, int(32 * dpr)),
                cv2.FONT_HERSHEY_SIMPLEX, 0.45 * dpr, (200, 200, 200), 1, cv2.LINE_AA)
    cv2.putText(frame, str(status), (x0, h - int(48 * dpr)),
                cv2.FONT_HERSHEY_SIMPLEX, s, (0, 0, 0), 3, cv2.LINE_AA)
    cv2.putText(frame, str(status), (x0, h - int(48 * dpr)),
                cv2.FONT_HERSHEY_SIMPLEX, s, (255, 255, 255), 1, cv2.LINE_AA)
    mode = getattr(theme.mode, "value", theme.mode)
    info = f"Mode: {mode} // Tension: {float(theme.tension):.2f}"
    cv2.putText(frame, info, (x0, h - int(24 * dpr)),
                cv2.FONT_HERSHEY_SIMPLEX, 0.45 * dpr, gold, 1, cv2.LINE_AA)
    if fps is not None:
        fps_text = f"FPS: {fps:5.1f}"
        cv2.putText(frame, fps_text, (frame.shape[1] - int(120 * dpr), h - int(12 * dpr)),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.45 * dpr, (255, 255, 128), 1, cv2.LINE_AA)
    return frame
