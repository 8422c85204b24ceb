from dataclasses import replace

import numpy as np
import pytest

from interaction import MODE_FORCES, compute_forces, nearest_targets, structure_behavior
from particles import ParticleStore
from theme import DEFAULT_THEME, InteractionMode


def _theme(mode, **over):
    return replace(DEFAULT_THEME, mode=mode, **over)


def _store(points, structure=True, seed=0):
    n = len(points)
    p = {"structure_count": n if structure else 0, "stardust_count": 0 if structure else n}
    s = ParticleStore(p, rng=np.random.default_rng(seed))
    s.initialize(1000, 1000, 1.0)
    s.pos = np.asarray(points, dtype=np.float64)
    s.vel[:] = 0.0
    return s


def test_every_mode_has_a_behavior():
    assert set(MODE_FORCES) == set(InteractionMode)


def test_unknown_mode_uses_resonance_fallback():
    assert structure_behavior("SPIRAL") is MODE_FORCES[InteractionMode.RESONANCE]
    assert structure_behavior(None) is MODE_FORCES[InteractionMode.RESONANCE]


def test_ambient_drift_without_targets_ignores_theme():
    s = _store([[100.0, 200.0], [300.0, 50.0]])
    a = compute_forces(s, [], _theme(InteractionMode.VOID, entropy=1.0), 1.0, 1234.0)
    b = compute_forces(s, [], _theme(InteractionMode.FRAGMENT, tension=2.0), 1.0, 1234.0)
    assert np.array_equal(a, b)
    assert np.all(np.isfinite(a))
    assert np.all(a[:, 1] == 0.0)
    assert np.all(np.abs(a[:, 0]) <= 0.01)


def test_nearest_target_ties_go_to_first():
    pos = np.array([[0.0, 0.0]])
    tgt, d = nearest_targets(pos, [(10.0, 0.0), (-10.0, 0.0), (0.0, 10.0)])
    assert tgt[0].tolist() == [10.0, 0.0]
    assert d[0] == 10.0


def test_no_force_outside_interaction_radius():
    s = _store([[0.0, 0.0]])
    f = compute_forces(s, [(400.0, 0.0)], _theme(InteractionMode.VOID), 1.0, 0.0)
    assert np.all(f == 0.0)
    # radius scales with dpr
    f = compute_forces(s, [(400.0, 0.0)], _theme(InteractionMode.VOID), 2.0, 0.0)
    assert f[0, 0] > 0.0


def test_void_pulls_straight_in():
    s = _store([[100.0, 100.0]])
    f = compute_forces(s, [(250.0, 100.0)], _theme(InteractionMode.VOID), 1.0, 0.0)
    force = 1.0 - 150.0 / 300.0
    assert f[0, 0] == pytest.approx(150.0 * 0.08 * force)
    assert f[0, 1] == pytest.approx(0.0)


def test_weave_has_curl_component():
    s = _store([[100.0, 100.0]])
    f = compute_forces(s, [(250.0, 100.0)], _theme(InteractionMode.WEAVE, tension=1.0), 1.0, 0.0)
    force = 0.5
    assert f[0, 0] == pytest.approx(150.0 * 0.02 * force)
    assert f[0, 1] == pytest.approx(150.0 * 0.05 * force)


def test_weave_tension_is_clamped():
    s = _store([[100.0, 100.0]])
    hi = compute_forces(s, [(250.0, 100.0)], _theme(InteractionMode.WEAVE, tension=50.0), 1.0, 0.0)
    top = compute_forces(s, [(250.0, 100.0)], _theme(InteractionMode.WEAVE, tension=2.0), 1.0, 0.0)
    assert np.allclose(hi, top)


def test_fragment_repels_only_inside_inner_radius():
    s = _store([[100.0, 100.0], [100.0, 600.0]])
    targets = [(250.0, 100.0), (100.0, 850.0)]
    f = compute_forces(s, targets, _theme(InteractionMode.FRAGMENT), 1.0, 0.0)
    assert f[0, 0] < 0.0
    # 250 px away: inside the interaction radius, outside the fragment radius
    assert np.all(f[1] == 0.0)


def test_crystallize_snaps_to_grid():
    s = _store([[130.0, 370.0]])
    f = compute_forces(s, [(130.0, 370.0)], _theme(InteractionMode.CRYSTALLIZE, geometry_scale=100), 1.0, 0.0)
    assert f[0, 0] == pytest.approx((100.0 - 130.0) * 0.05)
    assert f[0, 1] == pytest.approx((400.0 - 370.0) * 0.05)


def test_resonance_ignores_target_position():
    s = _store([[100.0, 100.0]])
    a = compute_forces(s, [(150.0, 100.0)], _theme(InteractionMode.RESONANCE), 1.0, 500.0)
    b = compute_forces(s, [(100.0, 160.0)], _theme(InteractionMode.RESONANCE), 1.0, 500.0)
    assert np.allclose(a, b)
    assert a[0, 0] == pytest.approx(np.sin(5.0 + 10.0) * 0.5)
    assert a[0, 1] == pytest.approx(np.cos(5.0 + 10.0) * 0.5)


def test_stardust_ignores_mode():
    targets = [(200.0, 100.0)]
    forces = []
    for mode in InteractionMode:
        s = _store([[100.0, 100.0]], structure=False, seed=7)
        forces.append(compute_forces(s, targets, _theme(mode, entropy=0.5), 1.0, 0.0))
    for f in forces[1:]:
        assert np.allclose(f, forces[0])


def test_stardust_without_entropy_is_weak_pull():
    s = _store([[100.0, 100.0]], structure=False)
    f = compute_forces(s, [(200.0, 100.0)], _theme(InteractionMode.WEAVE, entropy=0.0), 1.0, 0.0)
    force = 1.0 - 100.0 / 300.0
    assert f[0, 0] == pytest.approx(100.0 * 0.002 * force)
    assert f[0, 1] == pytest.approx(0.0)


def test_non_finite_theme_numbers_fall_back_to_defaults():
    s = _store([[130.0, 370.0], [500.0, 500.0]])
    targets = [(130.0, 370.0)]
    nan = float("nan")
    broken = _theme(InteractionMode.CRYSTALLIZE, geometry_scale=nan, tension=float("inf"), entropy=nan)
    f = compute_forces(s, targets, broken, 1.0, 0.0)
    assert np.all(np.isfinite(f))
    ref = compute_forces(s, targets, _theme(InteractionMode.CRYSTALLIZE), 1.0, 0.0)
    assert np.allclose(f, ref)
