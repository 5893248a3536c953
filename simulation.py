# simulation.py
"""
Handles the per-tick physics: integration, boundary handling, trail history
and motion-derived colour.

This module defines the Simulation class, which advances the ParticleSystem
by one tick given an immutable ForceContext. The integration and appearance
stages are plain functions over the particle arrays so they can be reasoned
about (and tested) in isolation.
"""
import logging
import numpy as np

from constants import FRICTION, BOUNCE_DAMPING, TRAIL_LENGTH, TRAIL_DECAY
from forces import ForceContext, compute_accelerations, REPULSION, CHAOS
from particle import ParticleSystem

# --- Data Contracts ---
#
# integrate(positions, velocities, accelerations, width, height) -> None
#   - Side Effects: Updates positions and velocities in place.
#   - Invariants: Afterwards 0 <= x <= width and 0 <= y <= height for every particle.
#
# update_trails(particles: ParticleSystem) -> None
#   - Side Effects: Appends the current positions with alpha 1, evicts the
#     oldest entry beyond TRAIL_LENGTH, then decays every live alpha once.
#
# update_appearance(particles, color_shift, elapsed_time, audio) -> None
#   - Side Effects: Overwrites hues and brightness from current speed.
#
# class Simulation:
#   - step(self, context: ForceContext, trails_enabled: bool, color_shift: float) -> None
#     - Invariants: Particle count remains constant. Holds no timing state;
#       simulated time arrives in context.time.

# Noise is only drawn for the modes that consume it, so the seeded generator
# stream is untouched by the deterministic modes.
NOISY_MODES = (REPULSION, CHAOS)


def integrate(positions: np.ndarray, velocities: np.ndarray, accelerations: np.ndarray,
              width: float, height: float) -> None:
    """Friction, velocity and position update, then inelastic boundary reflection."""
    velocities *= FRICTION
    velocities += accelerations
    positions += velocities

    # Each axis is checked independently so corner hits bounce on both.
    for axis, limit in ((0, width), (1, height)):
        below = positions[:, axis] < 0.0
        positions[below, axis] = 0.0
        velocities[below, axis] *= BOUNCE_DAMPING

        above = positions[:, axis] > limit
        positions[above, axis] = limit
        velocities[above, axis] *= BOUNCE_DAMPING


def update_trails(particles: ParticleSystem) -> None:
    """Pushes the current positions onto every trail (FIFO, bounded) and decays alphas."""
    length = particles.trail_length
    if length < TRAIL_LENGTH:
        slot = length
        particles.trail_length = length + 1
    else:
        # Drop the oldest entry.
        particles.trail_positions[:, :-1] = particles.trail_positions[:, 1:]
        particles.trail_alpha[:, :-1] = particles.trail_alpha[:, 1:]
        slot = TRAIL_LENGTH - 1

    particles.trail_positions[:, slot] = particles.positions
    particles.trail_alpha[:, slot] = 1.0
    particles.trail_alpha[:, :particles.trail_length] *= TRAIL_DECAY


def update_appearance(particles: ParticleSystem, color_shift: float,
                      elapsed_time: float, audio: float) -> None:
    """Recomputes hue and brightness from speed; nothing from the previous tick is kept."""
    speed = np.sqrt(particles.velocities[:, 0]**2 + particles.velocities[:, 1]**2)
    particles.hues = np.mod(speed * 20.0 + color_shift + elapsed_time * 0.5, 360.0)
    particles.brightness = np.minimum(100.0, 50.0 + speed * 10.0 + audio * 50.0)


class Simulation:
    """
    Advances the particle system one tick at a time.
    """
    def __init__(self, particles: ParticleSystem, width: float, height: float):
        """
        Initializes the simulation.

        Args:
            particles (ParticleSystem): The population to simulate. Its
                generator is also used for per-tick noise.
            width (float): Viewport width.
            height (float): Viewport height.
        """
        if width <= 0 or height <= 0:
            msg = f"Configuration error: viewport must be positive, got {width}x{height}."
            logging.critical(msg)
            raise ValueError(msg)

        self.particles = particles
        self.width = float(width)
        self.height = float(height)
        logging.info(f"Simulation initialized for a {self.width:.0f}x{self.height:.0f} viewport.")

    def reset(self, count: int) -> None:
        """Replaces the population at the current viewport size."""
        self.particles.reset(count, self.width, self.height)

    def resize(self, width: float, height: float) -> None:
        """
        Changes the bounds used by boundary handling. Particles are not moved;
        any left outside are clamped on their next step.
        """
        self.width = float(width)
        self.height = float(height)
        logging.info(f"Viewport resized to {self.width:.0f}x{self.height:.0f}.")

    def step(self, context: ForceContext, trails_enabled: bool, color_shift: float) -> None:
        """
        Executes one tick of physics for every particle.
        """
        particles = self.particles

        # 1. Per-tick noise for the stochastic modes
        if context.mode in NOISY_MODES:
            noise = particles.rng.random((particles.particle_count, 2)) - 0.5
        else:
            noise = np.zeros((particles.particle_count, 2), dtype=np.float64)

        # 2. Accelerations are recomputed from zero every tick (using Numba)
        particles.accelerations = compute_accelerations(particles.positions, context, noise)

        # 3. Friction, velocity, position and boundary reflection
        integrate(particles.positions, particles.velocities, particles.accelerations,
                  self.width, self.height)

        # 4. Trail history is frozen, not cleared, while trails are off
        if trails_enabled:
            update_trails(particles)

        # 5. Colour follows motion
        update_appearance(particles, color_shift, context.time, context.audio)
