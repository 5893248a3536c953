# frame_driver.py
"""
Runs the per-frame pipeline: timing, audio sampling, physics, drawing.

The FrameDriver is the only component holding timing state. It is a two
state machine (idle, running). While running it performs one tick at a
time; control events queued by the host between ticks are applied before
the next tick starts, so a change never becomes visible mid-tick.
"""
import logging
import time
import numpy as np
from typing import Callable, NamedTuple, Optional

from constants import TIME_STEP, MODE_DESCRIPTIONS
from controls import Controls, RESET, RESIZE, QUIT
from forces import ForceContext, mode_index
from simulation import Simulation

# --- Data Contracts ---
#
# class FrameDriver:
#   - __init__(self, simulation, renderer, controls, audio_source=None, clock=time.perf_counter)
#     - renderer: any object with fade(trails_enabled), draw_particles(particles,
#       trails_enabled, bloom_enabled), draw_spectrum(spectrum),
#       draw_interaction_ring(x, y, radius), draw_stats(lines),
#       draw_mode_banner(title, description), resize(width, height), present().
#     - audio_source: None, or an object with sample_energy() and
#       sample_spectrum(). Missing methods are treated as no audio.
#     - clock: returns seconds as a float; injectable for tests.
#
#   - tick(self) -> FrameStats:
#     - Side Effects: Advances elapsed_time by exactly TIME_STEP, steps the
#       simulation once and issues draw calls in pipeline order.
#
#   - run(self, max_steps: int = 0, on_frame=None, log_throttle: int = 300) -> int
#     - Outputs: number of ticks performed by this call.
#     - on_frame(stats) is called after every tick; returning False stops the loop.

IDLE = "idle"
RUNNING = "running"


class FrameStats(NamedTuple):
    tick: int
    fps: float
    particle_count: int
    mode: str
    audio_energy: float
    audio_attached: bool


class FrameDriver:
    """
    Orchestrates one tick of the engine and the loop that repeats it.
    """
    def __init__(self, simulation: Simulation, renderer, controls: Controls,
                 audio_source=None, clock: Callable[[], float] = time.perf_counter):
        self.simulation = simulation
        self.renderer = renderer
        self.controls = controls
        self.audio_source = audio_source
        self.clock = clock

        self.state = IDLE
        self.elapsed_time = 0.0
        self.fps = 0.0
        self.tick_count = 0
        self._last_frame: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self.state == RUNNING

    @property
    def audio_attached(self) -> bool:
        return (
            self.audio_source is not None
            and callable(getattr(self.audio_source, 'sample_energy', None))
        )

    def start(self) -> None:
        if self.state == RUNNING:
            return
        self.state = RUNNING
        self._last_frame = self.clock()
        logging.info("Frame driver started.")

    def stop(self) -> None:
        """Prevents the next tick from being scheduled; a tick in progress completes."""
        if self.state == IDLE:
            return
        self.state = IDLE
        logging.info(f"Frame driver stopped after {self.tick_count} ticks.")

    def apply_control_events(self) -> None:
        """Applies every queued reset/resize/quit request, oldest first."""
        for event in self.controls.drain_events():
            if event.kind == RESET:
                self.simulation.reset(self.controls.params.particle_count)
            elif event.kind == RESIZE:
                width, height = event.payload
                self.simulation.resize(width, height)
                self.renderer.resize(width, height)
            elif event.kind == QUIT:
                self.stop()

    def _sample_energy(self) -> float:
        if not self.audio_attached:
            return 0.0
        return min(max(float(self.audio_source.sample_energy()), 0.0), 1.0)

    def _sample_spectrum(self) -> Optional[np.ndarray]:
        sample = getattr(self.audio_source, 'sample_spectrum', None)
        if not self.audio_attached or not callable(sample):
            return None
        return np.asarray(sample(), dtype=np.float64)

    def tick(self) -> FrameStats:
        """
        Executes one frame of the pipeline.
        """
        params = self.controls.params.snapshot()
        pointer = self.controls.pointer
        particles = self.simulation.particles

        # 1. Wall-clock timing, used only for the FPS readout
        now = self.clock()
        if self._last_frame is not None:
            delta_ms = (now - self._last_frame) * 1000.0
            self.fps = 1000.0 / delta_ms if delta_ms > 0 else 0.0
        self._last_frame = now

        # 2. Simulated time always advances by the same quantum
        self.elapsed_time += TIME_STEP

        # 3. Fade the previous frame
        self.renderer.fade(params.trails_enabled)

        # 4. Audio energy (zero when nothing is attached)
        audio = self._sample_energy()

        # 5. Physics for the whole population, then draw in storage order
        context = ForceContext(
            mode=mode_index(params.mode),
            pointer_x=pointer.x,
            pointer_y=pointer.y,
            pointer_down=pointer.down,
            interaction_radius=params.interaction_radius,
            turbulence=params.turbulence,
            audio=audio,
            time=self.elapsed_time,
            width=self.simulation.width,
            height=self.simulation.height,
        )
        self.simulation.step(context, params.trails_enabled, params.color_shift)
        self.renderer.draw_particles(particles, params.trails_enabled, params.bloom_enabled)

        # 6. Spectrum bars
        spectrum = self._sample_spectrum()
        if spectrum is not None:
            self.renderer.draw_spectrum(spectrum)

        # 7. Interaction ring
        if pointer.down:
            self.renderer.draw_interaction_ring(pointer.x, pointer.y, params.interaction_radius)

        # 8. Stats overlay
        if params.stats_enabled:
            lines = [
                f"FPS: {self.fps:.1f}",
                f"Particles: {len(particles)}",
                f"Mode: {params.mode}",
            ]
            if self.audio_attached:
                lines.append(f"Audio: {audio:.2f}")
            self.renderer.draw_stats(lines)
            self.renderer.draw_mode_banner(
                f"{params.mode.upper()} MODE", MODE_DESCRIPTIONS[params.mode]
            )

        self.renderer.present()
        self.tick_count += 1

        return FrameStats(
            tick=self.tick_count,
            fps=self.fps,
            particle_count=len(particles),
            mode=params.mode,
            audio_energy=audio,
            audio_attached=self.audio_attached,
        )

    def run(self, max_steps: int = 0, on_frame: Optional[Callable[[FrameStats], bool]] = None,
            log_throttle: int = 300) -> int:
        """
        Runs ticks until stopped, `max_steps` ticks have run (0 = no limit),
        or on_frame returns False. Returns the number of ticks performed.
        """
        self.start()
        performed = 0
        while self.is_running:
            self.apply_control_events()
            if not self.is_running:
                break

            stats = self.tick()
            performed += 1

            # Hot loops must throttle logs
            if log_throttle and performed % log_throttle == 0:
                speeds = np.linalg.norm(self.simulation.particles.velocities, axis=1)
                logging.info(f"Tick {stats.tick} | FPS {stats.fps:.1f} | Mode {stats.mode}")
                logging.debug(
                    f"Tick {stats.tick} | Mean speed: {float(np.mean(speeds)) if speeds.size else 0.0:.4f} "
                    f"| Audio: {stats.audio_energy:.3f}"
                )

            if on_frame is not None and on_frame(stats) is False:
                self.stop()
            elif max_steps and performed >= max_steps:
                logging.info(f"Reached max_steps ({max_steps}). Stopping.")
                self.stop()

        return performed
