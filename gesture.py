# gesture.py
# Landmarks -> what the visualizer consumes: fingertip targets, the skeleton,
# hand openness and a kinetic-energy estimate for the theme request.

from __future__ import annotations
import math

from geometry import _clamp, dist, normalize_landmark

WRIST = 0
INDEX_TIP = 8
FINGERTIPS = (4, 8, 12, 16, 20)


def hand_points(hands, width, height):
    """
    hands: [[(x,y)*21], ...] normalized camera coords.
    Returns (tips, skeleton) in mirrored canvas pixels; 5 tips + 21 joints per hand.
    """
    tips = []
    skeleton = []
    for lms in hands or []:
        tips.extend(normalize_landmark(lms[i], width, height) for i in FINGERTIPS)
        skeleton.extend(normalize_landmark(lm, width, height) for lm in lms)
    return tips, skeleton


def hand_spread(hands) -> float:
    """Openness 0..1 from the mean wrist -> index tip distance."""
    if not hands:
        return 0.0
    total = 0.0
    for lms in hands:
        total += dist(lms[WRIST], lms[INDEX_TIP])
    avg = total / len(hands)
    return _clamp((avg - 0.15) * 3.0, 0.0, 1.0)


class MotionMeter:
    """
    Kinetic energy 0..1 from how fast the fingertip centroid moves.

    The raw speed (normalized units / s) is mapped linearly so that
    `full_speed` reads as 1.0, then smoothed with an EMA.
    """

    def __init__(self, full_speed: float = 1.5, smoothing: float = 0.2):
        self.full_speed = max(1e-6, float(full_speed))
        self.smoothing = _clamp(float(smoothing), 0.0, 1.0)
        self.reset()

    def reset(self) -> None:
        self._last = None   # (t, cx, cy)
        self.value = 0.0

    def update(self, hands, t: float) -> float:
        if not hands:
            # hands gone: energy bleeds off
            self._last = None
            self.value *= 1.0 - self.smoothing
            return self.value

        pts = [lms[i] for lms in hands for i in FINGERTIPS]
        cx = sum(p[0] for p in pts) / len(pts)
        cy = sum(p[1] for p in pts) / len(pts)

        if self._last is not None:
            dt = float(t) - self._last[0]
            if dt > 1e-6:
                speed = math.hypot(cx - self._last[1], cy - self._last[2]) / dt
                sample = _clamp(speed / self.full_speed, 0.0, 1.0)
                self.value += self.smoothing * (sample - self.value)
        self._last = (float(t), cx, cy)
        return self.value
