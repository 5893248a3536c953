# controls.py
"""
The control layer between the host's input events and the engine.

It owns the mutable parameter set and pointer state, validates and clamps
every change before the engine sees it, and queues discrete requests
(population reset, resize, quit) to be applied between ticks.
"""
import logging
from collections import deque
from typing import Any, Deque, Dict, NamedTuple, Optional

from constants import (
    MODES, PARTICLE_COUNT_RANGE, PARTICLE_COUNT_STEP, COLOR_SHIFT_RANGE,
    TURBULENCE_RANGE, INTERACTION_RADIUS_RANGE
)

# --- Data Contracts ---
#
# class ParameterSet:
#   - Every setter clamps into the documented range; set_mode raises
#     ValueError for unknown names.
#   - snapshot() -> ParameterSnapshot: an immutable copy read once per tick.
#
# class Controls:
#   - handle_key(name: str) -> None: name as returned by pygame.key.name().
#   - pointer_move/pointer_down/pointer_up: update PointerState.
#   - request_reset(), request_resize(w, h), request_quit(): queue events.
#   - drain_events() -> list of ControlEvent, oldest first; empties the queue.

RESET = "reset"
RESIZE = "resize"
QUIT = "quit"


def _clamp(value: float, bounds) -> float:
    return min(max(value, bounds[0]), bounds[1])


class ControlEvent(NamedTuple):
    kind: str
    payload: Optional[tuple] = None


class ParameterSnapshot(NamedTuple):
    mode: str
    particle_count: int
    color_shift: float
    turbulence: float
    interaction_radius: float
    trails_enabled: bool
    bloom_enabled: bool
    stats_enabled: bool


class PointerState:
    """Pointer position, button state and the delta of the last move."""
    def __init__(self, x: float = 0.0, y: float = 0.0):
        self.x = float(x)
        self.y = float(y)
        self.down = False
        self.vx = 0.0
        self.vy = 0.0

    def move(self, x: float, y: float) -> None:
        self.vx = float(x) - self.x
        self.vy = float(y) - self.y
        self.x = float(x)
        self.y = float(y)


class ParameterSet:
    """
    Mutable simulation parameters. Out-of-range values are clamped here so
    the engine never has to handle them.
    """
    def __init__(self, params: Optional[Dict[str, Any]] = None):
        params = params or {}
        self.mode = "gravity"
        self.set_mode(params.get('mode', 'gravity'))
        self.particle_count = self._clamp_count(params.get('particle_count', 500))
        self.color_shift = _clamp(float(params.get('color_shift', 0.0)), COLOR_SHIFT_RANGE)
        self.turbulence = _clamp(float(params.get('turbulence', 0.5)), TURBULENCE_RANGE)
        self.interaction_radius = _clamp(
            float(params.get('interaction_radius', 150.0)), INTERACTION_RADIUS_RANGE
        )
        self.trails_enabled = bool(params.get('trails', True))
        self.bloom_enabled = bool(params.get('bloom', True))
        self.stats_enabled = bool(params.get('stats', True))

    @staticmethod
    def _clamp_count(count) -> int:
        count = int(round(float(count) / PARTICLE_COUNT_STEP)) * PARTICLE_COUNT_STEP
        return int(_clamp(count, PARTICLE_COUNT_RANGE))

    def set_mode(self, mode: str) -> None:
        if mode not in MODES:
            msg = f"Unknown force field mode '{mode}'. Expected one of: {', '.join(MODES)}."
            logging.error(msg)
            raise ValueError(msg)
        if mode != self.mode:
            logging.info(f"Mode switched: {self.mode} -> {mode}")
        self.mode = mode

    def set_particle_count(self, count) -> bool:
        """Returns True if the count actually changed."""
        new_count = self._clamp_count(count)
        changed = new_count != self.particle_count
        self.particle_count = new_count
        return changed

    def set_color_shift(self, value: float) -> None:
        self.color_shift = _clamp(float(value), COLOR_SHIFT_RANGE)

    def set_turbulence(self, value: float) -> None:
        # Rounded so repeated key steps do not accumulate float error.
        self.turbulence = round(_clamp(float(value), TURBULENCE_RANGE), 6)

    def set_interaction_radius(self, value: float) -> None:
        self.interaction_radius = _clamp(float(value), INTERACTION_RADIUS_RANGE)

    def snapshot(self) -> ParameterSnapshot:
        return ParameterSnapshot(
            mode=self.mode,
            particle_count=self.particle_count,
            color_shift=self.color_shift,
            turbulence=self.turbulence,
            interaction_radius=self.interaction_radius,
            trails_enabled=self.trails_enabled,
            bloom_enabled=self.bloom_enabled,
            stats_enabled=self.stats_enabled,
        )


class Controls:
    """
    Translates host input into parameter changes and queued control events.
    """
    def __init__(self, params: ParameterSet, pointer: Optional[PointerState] = None):
        self.params = params
        self.pointer = pointer if pointer is not None else PointerState()
        self._events: Deque[ControlEvent] = deque()

    # --- Discrete requests ---
    def request_reset(self) -> None:
        self._events.append(ControlEvent(RESET))

    def request_resize(self, width: int, height: int) -> None:
        self._events.append(ControlEvent(RESIZE, (int(width), int(height))))

    def request_quit(self) -> None:
        self._events.append(ControlEvent(QUIT))

    def drain_events(self) -> list:
        events = list(self._events)
        self._events.clear()
        return events

    # --- Pointer ---
    def pointer_move(self, x: float, y: float) -> None:
        self.pointer.move(x, y)

    def pointer_down(self) -> None:
        self.pointer.down = True

    def pointer_up(self) -> None:
        self.pointer.down = False

    # --- Parameters ---
    def change_particle_count(self, count) -> None:
        if self.params.set_particle_count(count):
            logging.info(f"Particle count set to {self.params.particle_count}.")
            self.request_reset()

    def handle_key(self, name: str) -> None:
        """Applies a key press. Unbound keys are ignored."""
        params = self.params
        if name.isdigit() and 1 <= int(name) <= len(MODES):
            params.set_mode(MODES[int(name) - 1])
        elif name == 't':
            params.trails_enabled = not params.trails_enabled
            logging.info(f"Trails {'enabled' if params.trails_enabled else 'disabled'}.")
        elif name == 'b':
            params.bloom_enabled = not params.bloom_enabled
            logging.info(f"Bloom {'enabled' if params.bloom_enabled else 'disabled'}.")
        elif name == 's':
            params.stats_enabled = not params.stats_enabled
        elif name == 'space':
            logging.info("Population reset requested.")
            self.request_reset()
        elif name == 'up':
            self.change_particle_count(params.particle_count + PARTICLE_COUNT_STEP)
        elif name == 'down':
            self.change_particle_count(params.particle_count - PARTICLE_COUNT_STEP)
        elif name == 'right':
            params.set_color_shift(params.color_shift + 10.0)
        elif name == 'left':
            params.set_color_shift(params.color_shift - 10.0)
        elif name == '=':
            params.set_turbulence(params.turbulence + 0.1)
        elif name == '-':
            params.set_turbulence(params.turbulence - 0.1)
        elif name == ']':
            params.set_interaction_radius(params.interaction_radius + 10.0)
        elif name == '[':
            params.set_interaction_radius(params.interaction_radius - 10.0)
        elif name == 'escape':
            logging.info("ESC key pressed. Quit requested.")
            self.request_quit()
