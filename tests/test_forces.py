import math

import numpy as np
import pytest

from constants import MODES
from forces import (
    ForceContext, compute_acceleration, compute_accelerations, mode_index,
    GRAVITY, REPULSION, VORTEX, WAVE, FLOW, ATTRACTOR, CHAOS, AURORA
)


def make_context(mode, **overrides):
    values = dict(
        mode=mode, pointer_x=0.0, pointer_y=0.0, pointer_down=False,
        interaction_radius=150.0, turbulence=0.0, audio=0.0, time=0.0,
        width=800.0, height=600.0,
    )
    values.update(overrides)
    return ForceContext(**values)


def test_mode_index_follows_mode_order():
    assert [mode_index(name) for name in MODES] == list(range(8))
    assert mode_index("aurora") == AURORA


def test_mode_index_rejects_unknown_names():
    with pytest.raises(ValueError):
        mode_index("magnetism")


def test_gravity_constant_pull():
    assert compute_acceleration(100, 100, make_context(GRAVITY)) == pytest.approx((0.0, 0.1))
    assert compute_acceleration(100, 100, make_context(GRAVITY, audio=1.0)) == pytest.approx((0.0, 0.6))


def test_gravity_pushes_away_from_held_pointer():
    ctx = make_context(GRAVITY, pointer_x=100.0, pointer_y=100.0, pointer_down=True)
    ax, ay = compute_acceleration(130, 100, ctx)
    assert ax == pytest.approx(2.0 * (1 - 30 / 150))
    assert ay == pytest.approx(0.1)


def test_gravity_ignores_pointer_when_not_held():
    ctx = make_context(GRAVITY, pointer_x=100.0, pointer_y=100.0, pointer_down=False)
    assert compute_acceleration(130, 100, ctx) == pytest.approx((0.0, 0.1))


def test_gravity_pointer_on_particle_is_finite():
    ctx = make_context(GRAVITY, pointer_x=100.0, pointer_y=100.0, pointer_down=True)
    ax, ay = compute_acceleration(100, 100, ctx)
    assert (ax, ay) == pytest.approx((0.0, 0.1))


def test_repulsion_inside_radius():
    ctx = make_context(REPULSION, pointer_x=50.0, pointer_y=100.0, interaction_radius=100.0)
    ax, ay = compute_acceleration(100, 100, ctx)
    assert ax == pytest.approx(3.0 * 0.5)
    assert ay == pytest.approx(0.0)


def test_repulsion_outside_radius_is_only_noise():
    ctx = make_context(REPULSION, pointer_x=0.0, pointer_y=0.0, interaction_radius=100.0, turbulence=2.0)
    ax, ay = compute_acceleration(500, 500, ctx, noise=(0.5, -0.25))
    assert (ax, ay) == pytest.approx((1.0, -0.5))


def test_repulsion_at_pointer_skips_force():
    ctx = make_context(REPULSION, pointer_x=10.0, pointer_y=10.0)
    ax, ay = compute_acceleration(10, 10, ctx)
    assert (ax, ay) == (0.0, 0.0)


def test_vortex_is_tangential_with_inward_drift():
    ctx = make_context(VORTEX, pointer_x=0.0, pointer_y=0.0, interaction_radius=50.0)
    ax, ay = compute_acceleration(10, 0, ctx)
    assert ax == pytest.approx(-0.1)
    assert ay == pytest.approx(-0.5)


def test_vortex_reaches_twice_the_radius_only():
    ctx = make_context(VORTEX, interaction_radius=50.0, audio=0.5)
    assert compute_acceleration(99, 0, ctx) != (0.0, 0.0)
    assert compute_acceleration(101, 0, ctx) == (0.0, 0.0)


def test_wave_matches_law():
    ctx = make_context(WAVE, time=3.0, audio=0.4)
    ax, ay = compute_acceleration(120, 45, ctx)
    assert ax == pytest.approx(math.cos(45 * 0.01 + 3.0 * 0.03) * 0.5)
    assert ay == pytest.approx(math.sin(120 * 0.01 + 3.0 * 0.05) * 0.5 + 0.4 * math.sin(3.0 * 0.1))


def test_flow_matches_law():
    ctx = make_context(FLOW, time=2.0)
    ax, ay = compute_acceleration(123, 45, ctx)
    assert ax == pytest.approx(2 * math.sin(123 * 0.005 + 2.0 * 0.02) * math.cos(45 * 0.003))
    assert ay == pytest.approx(2 * math.cos(123 * 0.003 + 2.0 * 0.01) * math.sin(45 * 0.005))


def test_attractors_cancel_at_the_centre():
    ax, ay = compute_acceleration(400, 300, make_context(ATTRACTOR))
    assert ax == pytest.approx(0.0, abs=1e-12)
    assert ay == pytest.approx(0.0, abs=1e-12)


def test_attractor_coincident_with_particle_is_skipped():
    ax, ay = compute_acceleration(200, 300, make_context(ATTRACTOR))
    assert math.isfinite(ax) and math.isfinite(ay)
    # The attractor at (600, 300) pulls right, the vertical pair cancels.
    assert ax > 0
    assert ay == pytest.approx(0.0, abs=1e-12)


def test_attractor_is_inverse_distance():
    # Far left of a tiny viewport: all four attractors lie in nearly the same direction.
    ctx = make_context(ATTRACTOR, width=2.0, height=2.0)
    ax, _ = compute_acceleration(-1000.0, 1.0, ctx)
    assert ax == pytest.approx(4 * 50.0 / 1001.0, rel=1e-3)


def test_chaos_matches_law():
    ctx = make_context(CHAOS, time=5.0, audio=0.5)
    ax, ay = compute_acceleration(10, 20, ctx, noise=(0.2, -0.4))
    assert ax == pytest.approx(math.sin(0.5 + 0.1) * 5 + 0.2 * 0.5 * 10)
    assert ay == pytest.approx(math.cos(0.75 + 0.2) * 5 - 0.4 * 0.5 * 10)


def test_aurora_pulls_toward_ribbon():
    ctx = make_context(AURORA, height=600.0)
    ribbon = 0.3 * 600.0
    _, on_ribbon = compute_acceleration(0, ribbon, ctx)
    _, below = compute_acceleration(0, ribbon + 100, ctx)
    _, above = compute_acceleration(0, ribbon - 100, ctx)
    assert on_ribbon == pytest.approx(0.0)
    assert below == pytest.approx(-0.1)
    assert above == pytest.approx(0.1)


@pytest.mark.parametrize("mode", range(len(MODES)))
def test_vectorised_matches_single_particle(mode, rng):
    positions = rng.uniform([0, 0], [800, 600], size=(25, 2))
    noise = rng.random((25, 2)) - 0.5
    ctx = make_context(
        mode, pointer_x=400.0, pointer_y=300.0, pointer_down=True,
        turbulence=0.7, audio=0.3, time=1.6,
    )
    batch = compute_accelerations(positions, ctx, noise)
    assert batch.shape == (25, 2)
    for i in range(25):
        assert tuple(batch[i]) == pytest.approx(compute_acceleration(*positions[i], ctx, noise=tuple(noise[i])))


@pytest.mark.parametrize("mode", range(len(MODES)))
def test_every_mode_is_finite_at_degenerate_points(mode):
    positions = np.array([[0.0, 0.0], [200.0, 300.0], [400.0, 300.0], [800.0, 600.0]])
    ctx = make_context(mode, pointer_x=400.0, pointer_y=300.0, pointer_down=True, turbulence=1.0, audio=1.0)
    result = compute_accelerations(positions, ctx, np.zeros((4, 2)))
    assert np.all(np.isfinite(result))
