import os

# Pygame must be headless before it is imported anywhere.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pygame
import pytest

from controls import Controls, ParameterSet
from particle import ParticleSystem


class RecordingRenderer:
    """Stands in for the pygame Renderer and records every call in order."""
    def __init__(self, width=800, height=600):
        self.size = (width, height)
        self.calls = []

    def names(self):
        return [name for name, _ in self.calls]

    def count(self, name):
        return sum(1 for n, _ in self.calls if n == name)

    def fade(self, trails_enabled):
        self.calls.append(("fade", trails_enabled))

    def draw_particles(self, particles, trails_enabled, bloom_enabled):
        self.calls.append(("draw_particles", (len(particles), trails_enabled, bloom_enabled)))

    def draw_spectrum(self, spectrum):
        self.calls.append(("draw_spectrum", list(spectrum)))

    def draw_interaction_ring(self, x, y, radius):
        self.calls.append(("draw_interaction_ring", (x, y, radius)))

    def draw_stats(self, lines):
        self.calls.append(("draw_stats", list(lines)))

    def draw_mode_banner(self, title, description):
        self.calls.append(("draw_mode_banner", title))

    def resize(self, width, height):
        self.size = (width, height)
        self.calls.append(("resize", (width, height)))

    def present(self):
        self.calls.append(("present", None))


class FakeAudio:
    def __init__(self, energy=0.5, spectrum=(0.1, 0.5, 1.0)):
        self.energy = energy
        self.spectrum = list(spectrum)
        self.energy_polls = 0

    def sample_energy(self):
        self.energy_polls += 1
        return self.energy

    def sample_spectrum(self):
        return np.array(self.spectrum)


class FakeClock:
    """Advances by a fixed step every call."""
    def __init__(self, step=0.02):
        self.now = 0.0
        self.step = step

    def __call__(self):
        self.now += self.step
        return self.now


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def particles(rng):
    return ParticleSystem(200, 800, 600, rng)


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def controls():
    params = ParameterSet({"mode": "gravity", "particle_count": 200, "stats": True})
    return Controls(params)


@pytest.fixture
def fake_audio():
    return FakeAudio()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def surface():
    pygame.font.init()
    yield pygame.Surface((320, 240))
    pygame.font.quit()
