import numpy as np

from app import STATUS_SENSOR_DOWN, Visualizer, parse_args, read_hands
from params import Params
from theme import InteractionMode, VisualTheme

NEW_THEME = VisualTheme("#C2B280", "#003366", InteractionMode.FRAGMENT, 1.2, 0.9, 60.0, "shards of quiet light")


def _hand():
    return [(0.3 + 0.01 * i, 0.4 + 0.01 * i) for i in range(21)]


def _viz(request_fn):
    p = Params()
    p.width, p.height, p.dpr = 160, 120, 1.0
    p.motion_intensity = 0.5
    spawned = []
    viz = Visualizer(p, request_fn=request_fn, rng=np.random.default_rng(0), spawn=spawned.append)
    return viz, spawned


def test_frame_without_hands_renders_and_never_requests():
    calls = []
    viz, spawned = _viz(lambda *a: calls.append(a) or NEW_THEME)
    for i in range(5):
        out = viz.frame([], i * 16.0)
    assert out.shape == (120, 160, 3)
    assert spawned == []
    assert viz.sim.targets == []


def test_theme_swaps_in_on_a_later_frame():
    calls = []
    viz, spawned = _viz(lambda *a: calls.append(a) or NEW_THEME)
    viz.frame([_hand()], 0.0)
    assert len(spawned) == 1
    assert len(viz.sim.targets) == 5
    assert len(viz.sim.skeleton) == 21

    spawned.pop()()  # request completes between frames
    assert viz.theme.mode is InteractionMode.WEAVE
    viz.frame([_hand()], 16.0)
    assert viz.theme is NEW_THEME
    assert viz.status == "SHARDS OF QUIET LIGHT"
    assert calls[0][0] == 1
    assert calls[0][1] == 0.5


def test_resize_rebuilds_canvas_and_particles():
    viz, _ = _viz(lambda *a: None)
    viz.resize(100, 50, 2.0)
    assert viz.canvas.shape == (100, 200, 3)
    assert len(viz.sim.store) == 450
    out = viz.frame([], 0.0)
    assert out.shape == (100, 200, 3)


def test_sensor_down_status():
    viz, _ = _viz(lambda *a: None)
    viz.sensor_ok = False
    assert viz.status == STATUS_SENSOR_DOWN


def test_parse_args():
    p, cam = parse_args(["--width", "800", "--height", "600", "--dpr", "2", "--camera", "1", "--intensity", "0.3"])
    assert (p.width, p.height, p.dpr) == (800, 600, 2.0)
    assert cam == 1
    assert p.motion_intensity == 0.3


class FakeCapture:
    def __init__(self, ok=True):
        self.ok = ok

    def read(self):
        return self.ok, np.zeros((4, 4, 3), dtype=np.uint8)


class FakeTracker:
    def __init__(self, hands=None, error=None):
        self.hands = hands or []
        self.error = error

    def process(self, frame):
        if self.error is not None:
            raise self.error
        return self.hands


def test_read_hands_passes_tracker_output_through():
    hands, ok = read_hands(FakeCapture(), FakeTracker([_hand()]))
    assert ok
    assert hands == [_hand()]


def test_read_hands_degrades_when_camera_stops():
    hands, ok = read_hands(FakeCapture(ok=False), FakeTracker([_hand()]))
    assert (hands, ok) == ([], False)


def test_read_hands_degrades_when_tracker_raises(capsys):
    hands, ok = read_hands(FakeCapture(), FakeTracker(error=RuntimeError("graph crashed")))
    assert (hands, ok) == ([], False)
    assert "graph crashed" in capsys.readouterr().out

    viz, _ = _viz(lambda *a: None)
    viz.sensor_ok = ok
    assert viz.status == STATUS_SENSOR_DOWN
    assert viz.frame(hands, 0.0).shape == (120, 160, 3)
