# particle.py
"""
Manages the state of all particles in the simulation.

This module defines the ParticleSystem class, which is responsible for
initializing and storing particle data (position, velocity, size, colour,
trail history) in NumPy arrays. The population is replaced wholesale on
reset; particles are never spawned or destroyed individually.
"""
import logging
import numpy as np
from typing import Callable, NamedTuple, Optional, Tuple

from constants import (
    TRAIL_LENGTH, INITIAL_SPEED, SIZE_RANGE, HUE_RANGE, BRIGHTNESS_RANGE
)

# --- Data Contracts ---
#
# class ParticleSystem:
#   - __init__(self, count: int, width: float, height: float, rng: Optional[np.random.Generator]):
#     - Side Effects: Populates the store via reset().
#
#   - reset(self, count: int, width: float, height: float) -> None:
#     - Side Effects: Discards all particles and creates `count` fresh ones.
#     - Invariants:
#       - self.positions, self.velocities, self.accelerations: (N, 2) float64.
#       - self.sizes, self.hues, self.brightness, self.life, self.max_life: (N,) float64.
#       - self.trail_positions: (N, TRAIL_LENGTH, 2); self.trail_alpha: (N, TRAIL_LENGTH).
#         Only the first self.trail_length slots are live, ordered oldest -> newest.
#       - 0 <= self.trail_length <= TRAIL_LENGTH.
#
#   - for_each(self, fn: Callable[[int], None]) -> None:
#     - Calls fn with every particle index in storage order.


class Particle(NamedTuple):
    """Read-only snapshot of a single particle."""
    x: float
    y: float
    vx: float
    vy: float
    ax: float
    ay: float
    life: float
    max_life: float
    size: float
    hue: float
    brightness: float
    trail: Tuple[Tuple[float, float, float], ...]


class ParticleSystem:
    """
    A container for all particles, managing their state via NumPy arrays.
    """
    def __init__(self, count: int, width: float, height: float,
                 rng: Optional[np.random.Generator] = None):
        """
        Initializes the particle system.

        Args:
            count (int): Number of particles to create.
            width (float): The width of the viewport.
            height (float): The height of the viewport.
            rng (np.random.Generator): Source of all randomness. A fresh,
                unseeded generator is used when omitted.
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self.reset(count, width, height)

    def reset(self, count: int, width: float, height: float) -> None:
        """Replaces the whole population with freshly randomized particles."""
        count = int(count)
        self.particle_count = count

        self.positions = self.rng.uniform(
            low=[0.0, 0.0],
            high=[width, height],
            size=(count, 2)
        )
        self.velocities = self.rng.uniform(-INITIAL_SPEED, INITIAL_SPEED, size=(count, 2))
        self.accelerations = np.zeros((count, 2), dtype=np.float64)

        # Reserved for fading particles out; always 1 for now.
        self.life = np.ones(count, dtype=np.float64)
        self.max_life = np.ones(count, dtype=np.float64)

        self.sizes = self.rng.uniform(SIZE_RANGE[0], SIZE_RANGE[1], size=count)
        self.hues = self.rng.uniform(HUE_RANGE[0], HUE_RANGE[1], size=count)
        self.brightness = self.rng.uniform(BRIGHTNESS_RANGE[0], BRIGHTNESS_RANGE[1], size=count)

        self.trail_positions = np.zeros((count, TRAIL_LENGTH, 2), dtype=np.float64)
        self.trail_alpha = np.zeros((count, TRAIL_LENGTH), dtype=np.float64)
        self.trail_length = 0

        logging.info(f"ParticleSystem reset with {count} particles in a {width:.0f}x{height:.0f} viewport.")
        logging.debug(
            f"Particle data arrays created. "
            f"Positions shape: {self.positions.shape}, "
            f"Trail shape: {self.trail_positions.shape}"
        )

    def __len__(self) -> int:
        return self.particle_count

    def for_each(self, fn: Callable[[int], None]) -> None:
        """Applies fn to every particle index, in storage order."""
        for i in range(self.particle_count):
            fn(i)

    def trail(self, i: int) -> np.ndarray:
        """Returns the live trail of particle i as an (L, 3) array of x, y, alpha."""
        n = self.trail_length
        return np.column_stack((self.trail_positions[i, :n], self.trail_alpha[i, :n]))

    def particle(self, i: int) -> Particle:
        x, y = self.positions[i]
        vx, vy = self.velocities[i]
        ax, ay = self.accelerations[i]
        return Particle(
            x=float(x), y=float(y),
            vx=float(vx), vy=float(vy),
            ax=float(ax), ay=float(ay),
            life=float(self.life[i]), max_life=float(self.max_life[i]),
            size=float(self.sizes[i]),
            hue=float(self.hues[i]),
            brightness=float(self.brightness[i]),
            trail=tuple(tuple(float(v) for v in row) for row in self.trail(i)),
        )
