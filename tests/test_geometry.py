import math

from geometry import FALLBACK_RGB, dist, hex_to_rgba, normalize_landmark, rgba_to_bgr


def test_hex_to_rgba_exact_channels():
    assert hex_to_rgba("#D4AF37", 0.5) == (212, 175, 55, 0.5)
    assert hex_to_rgba("#1a237e", 1.0) == (26, 35, 126, 1.0)


def test_hex_to_rgba_malformed_falls_back():
    for bad in ("", "D4AF37", "#D4AF3", "#D4AF377", "#GGGGGG", "#-1-1-1", None, 42):
        r, g, b, a = hex_to_rgba(bad, 0.3)
        assert (r, g, b) == FALLBACK_RGB
        assert a == 0.3


def test_rgba_to_bgr_premultiplies_and_clamps():
    assert rgba_to_bgr((200, 100, 50, 0.5)) == (25.0, 50.0, 100.0)
    assert rgba_to_bgr((200, 100, 50, 3.0)) == (50.0, 100.0, 200.0)
    assert rgba_to_bgr((200, 100, 50, -1.0)) == (0.0, 0.0, 0.0)


def test_normalize_landmark_mirrors_x():
    assert normalize_landmark((0.25, 0.5), 400, 200) == (300.0, 100.0)
    assert normalize_landmark((0.0, 0.0), 400, 200) == (400.0, 0.0)


def test_dist():
    assert math.isclose(dist((0, 0), (3, 4)), 5.0)
