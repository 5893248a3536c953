# forces.py
"""
The force field: maps a particle's position and the per-tick context to an
acceleration.

Each mode is a small pure law. The laws are compiled with Numba and kept as
module-level functions operating on scalars and NumPy arrays only, as
required by Numba's nopython mode. Randomness (repulsion turbulence, chaos
jitter) is never drawn inside the kernels; the caller passes a per-particle
noise array in [-0.5, 0.5) drawn from the simulation's seeded generator.
"""
import math
import numpy as np
from numba import jit
from typing import NamedTuple, Tuple

from constants import MODES

# --- Data Contracts ---
#
# compute_acceleration(x: float, y: float, context: ForceContext,
#                      noise: Tuple[float, float] = (0.0, 0.0)) -> Tuple[float, float]
#   - Pure: the same inputs always give the same output.
#   - Never raises and never returns NaN for finite inputs; zero distances
#     skip the contribution that would divide by them.
#
# compute_accelerations(positions: np.ndarray, context: ForceContext,
#                       noise: np.ndarray) -> np.ndarray
#   - Inputs: positions (N, 2), noise (N, 2).
#   - Outputs: a new (N, 2) float64 array.

GRAVITY, REPULSION, VORTEX, WAVE, FLOW, ATTRACTOR, CHAOS, AURORA = range(len(MODES))

# Attractor positions as fractions of the viewport.
ATTRACTOR_POINTS = np.array([
    [0.25, 0.5],
    [0.75, 0.5],
    [0.5, 0.25],
    [0.5, 0.75],
], dtype=np.float64)


class ForceContext(NamedTuple):
    """Everything outside the particle that a force law may read. Built once per tick."""
    mode: int
    pointer_x: float
    pointer_y: float
    pointer_down: bool
    interaction_radius: float
    turbulence: float
    audio: float
    time: float
    width: float
    height: float


def mode_index(name: str) -> int:
    """Returns the kernel tag for a mode name."""
    try:
        return MODES.index(name)
    except ValueError:
        raise ValueError(f"Unknown force field mode '{name}'. Expected one of: {', '.join(MODES)}.") from None


@jit(nopython=True)
def _gravity(x, y, px, py, down, radius, audio):
    ax = 0.0
    ay = 0.1 + audio * 0.5
    if down:
        dx = x - px
        dy = y - py
        dist = math.sqrt(dx * dx + dy * dy)
        if dist > 0.0 and dist < radius:
            force = (radius - dist) / radius * 2.0
            ax += dx / dist * force
            ay += dy / dist * force
    return ax, ay


@jit(nopython=True)
def _repulsion(x, y, px, py, radius, turbulence, noise_x, noise_y):
    ax = 0.0
    ay = 0.0
    dx = x - px
    dy = y - py
    dist = math.sqrt(dx * dx + dy * dy)
    if dist > 0.0 and dist < radius:
        force = (radius - dist) / radius * 3.0
        ax += dx / dist * force
        ay += dy / dist * force
    ax += noise_x * turbulence
    ay += noise_y * turbulence
    return ax, ay


@jit(nopython=True)
def _vortex(x, y, px, py, radius, audio):
    ax = 0.0
    ay = 0.0
    dx = x - px
    dy = y - py
    dist = math.sqrt(dx * dx + dy * dy)
    if dist > 0.0 and dist < radius * 2.0:
        strength = 0.5 + audio
        ux = dx / dist
        uy = dy / dist
        # Subtracting the +90 degree rotation of (ux, uy), i.e. (-uy, ux).
        ax += uy * strength
        ay -= ux * strength
        # Slow inward drift so orbits decay toward the pointer.
        ax -= ux * 0.1
        ay -= uy * 0.1
    return ax, ay


@jit(nopython=True)
def _wave(x, y, t, audio):
    ax = math.cos(y * 0.01 + t * 0.03) * 0.5
    ay = math.sin(x * 0.01 + t * 0.05) * 0.5
    ay += audio * math.sin(t * 0.1)
    return ax, ay


@jit(nopython=True)
def _flow(x, y, t):
    noise_x = math.sin(x * 0.005 + t * 0.02) * math.cos(y * 0.003)
    noise_y = math.cos(x * 0.003 + t * 0.01) * math.sin(y * 0.005)
    return noise_x * 2.0, noise_y * 2.0


@jit(nopython=True)
def _attractor(x, y, width, height, points):
    ax = 0.0
    ay = 0.0
    for k in range(points.shape[0]):
        adx = points[k, 0] * width - x
        ady = points[k, 1] * height - y
        dist = math.sqrt(adx * adx + ady * ady)
        if dist > 0.0:
            # Inverse-distance falloff, not inverse-square.
            force = (500.0 / dist) * 0.1
            ax += adx / dist * force
            ay += ady / dist * force
    return ax, ay


@jit(nopython=True)
def _chaos(x, y, t, audio, noise_x, noise_y):
    ax = math.sin(t * 0.1 + x * 0.01) * 5.0
    ay = math.cos(t * 0.15 + y * 0.01) * 5.0
    ax += noise_x * audio * 10.0
    ay += noise_y * audio * 10.0
    return ax, ay


@jit(nopython=True)
def _aurora(x, y, t, audio, height):
    ribbon_y = math.sin(x * 0.003 + t * 0.02) * 100.0 + height * 0.3
    ay = -(y - ribbon_y) * 0.001
    ax = math.cos(y * 0.005 + t * 0.03) * 0.3
    ax += math.sin(t * 0.05 + x * 0.002) * audio * 2.0
    return ax, ay


@jit(nopython=True)
def _acceleration_numba(
    mode, x, y, noise_x, noise_y,
    px, py, down, radius, turbulence, audio, t, width, height, points
):
    """Dispatches one particle to the law selected by `mode`."""
    if mode == GRAVITY:
        return _gravity(x, y, px, py, down, radius, audio)
    elif mode == REPULSION:
        return _repulsion(x, y, px, py, radius, turbulence, noise_x, noise_y)
    elif mode == VORTEX:
        return _vortex(x, y, px, py, radius, audio)
    elif mode == WAVE:
        return _wave(x, y, t, audio)
    elif mode == FLOW:
        return _flow(x, y, t)
    elif mode == ATTRACTOR:
        return _attractor(x, y, width, height, points)
    elif mode == CHAOS:
        return _chaos(x, y, t, audio, noise_x, noise_y)
    elif mode == AURORA:
        return _aurora(x, y, t, audio, height)
    return 0.0, 0.0


@jit(nopython=True)
def _accelerations_numba(
    mode, positions, noise,
    px, py, down, radius, turbulence, audio, t, width, height, points
):
    """Numba-jitted loop applying the selected law to every particle."""
    particle_count = positions.shape[0]
    out = np.zeros((particle_count, 2), dtype=np.float64)
    for i in range(particle_count):
        ax, ay = _acceleration_numba(
            mode, positions[i, 0], positions[i, 1], noise[i, 0], noise[i, 1],
            px, py, down, radius, turbulence, audio, t, width, height, points
        )
        out[i, 0] = ax
        out[i, 1] = ay
    return out


def _context_args(context: ForceContext) -> tuple:
    return (
        float(context.pointer_x), float(context.pointer_y), bool(context.pointer_down),
        float(context.interaction_radius), float(context.turbulence), float(context.audio),
        float(context.time), float(context.width), float(context.height), ATTRACTOR_POINTS,
    )


def compute_acceleration(x: float, y: float, context: ForceContext,
                         noise: Tuple[float, float] = (0.0, 0.0)) -> Tuple[float, float]:
    """Acceleration of a single particle at (x, y) under `context`."""
    return _acceleration_numba(
        int(context.mode), float(x), float(y), float(noise[0]), float(noise[1]),
        *_context_args(context)
    )


def compute_accelerations(positions: np.ndarray, context: ForceContext,
                          noise: np.ndarray) -> np.ndarray:
    """Accelerations for the whole population under `context`."""
    return _accelerations_numba(
        int(context.mode),
        np.ascontiguousarray(positions, dtype=np.float64),
        np.ascontiguousarray(noise, dtype=np.float64),
        *_context_args(context)
    )
