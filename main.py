# main.py
"""
Main entry point for the Particle Playground.

This script orchestrates the entire lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Sets up the window, particles, controls and audio source.
4. Runs the frame loop.
5. Handles clean shutdown.
"""
import logging
import sys
import cProfile
import pstats
import io

import numpy as np

from utils import setup_logging, load_config


def main(config_path: str = 'config.json') -> int:
    """
    The main function to run the playground.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return 1

    try:
        setup_logging(config)
    except ValueError as e:
        print(f"FATAL: {e}")
        return 1

    logging.info("--- Particle Playground Starting ---")

    sim_params = config['simulation_parameters']
    run_params = config['run_control']
    vis_params = config['visualization']

    from audio import create_audio_source
    from controls import Controls, ParameterSet
    from frame_driver import FrameDriver
    from particle import ParticleSystem
    from simulation import Simulation
    from visualization import Visualizer

    # --- Component Initialization ---
    # 1. The visualizer determines the viewport dimensions.
    visualizer = Visualizer(vis_params)
    width, height = visualizer.width, visualizer.height

    # 2. All randomness is controlled by a single master seed.
    seed = sim_params.get('seed')
    rng = np.random.default_rng(seed)
    logging.info(f"Master RNG initialized with seed: {seed}")

    params = ParameterSet(sim_params)
    controls = Controls(params)
    controls.pointer_move(width / 2, height / 2)

    particles = ParticleSystem(params.particle_count, width, height, rng)
    simulation = Simulation(particles, width, height)
    audio_source = create_audio_source(config['audio'])

    driver = FrameDriver(simulation, visualizer.renderer, controls, audio_source)

    profiler = cProfile.Profile() if run_params.get('profile') else None
    if profiler is not None:
        profiler.enable()

    ticks = driver.run(
        max_steps=int(run_params.get('max_steps', 0)),
        on_frame=visualizer.frame_callback(controls),
        log_throttle=int(run_params.get('log_throttle_steps', 300)),
    )

    if profiler is not None:
        profiler.disable()

    visualizer.close()
    logging.info(f"Frame loop finished after {ticks} ticks.")

    if profiler is not None:
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        # Sort by cumulative time spent in the function
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Particle Playground Shutting Down ---")
    return 0


def cli() -> None:
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else 'config.json'))


if __name__ == "__main__":
    cli()
