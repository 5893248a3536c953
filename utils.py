# utils.py
"""
Utility functions for the particle playground.

This module provides helpers used across the application that do not
belong to the physics or rendering modules: logging setup, configuration
loading with defaults, and colour conversion.
"""
import copy
import logging
import logging.handlers
import json
import os
from typing import Any, Dict, List, Optional, Tuple

import pygame

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary containing a "logging" key with "level",
#       "format", and "log_file" sub-keys. All are optional.
#   - Outputs: None
#   - Side Effects: Configures the root Python logger. Creates a log
#     directory if it doesn't exist. Sets up a console handler and a
#     rotating file handler.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: The parsed config with every missing section or key filled
#     in from DEFAULT_CONFIG. The defaults themselves are never mutated.
#   - Raises: FileNotFoundError, json.JSONDecodeError, ValueError for a
#     non-object document or a section that is not an object (logged first).

DEFAULT_CONFIG: Dict[str, Any] = {
    "simulation_parameters": {
        "seed": None,
        "particle_count": 500,
        "mode": "gravity",
        "color_shift": 0.0,
        "turbulence": 0.5,
        "interaction_radius": 150.0,
        "trails": True,
        "bloom": True,
        "stats": True,
    },
    "audio": {
        "source": None,
    },
    "visualization": {
        "window_width": 1280,
        "window_height": 720,
        "fullscreen": False,
        "fps": 60,
    },
    "run_control": {
        "max_steps": 0,
        "log_throttle_steps": 300,
        "profile": False,
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(levelname)s - %(message)s",
        "log_file": "logs/simulation.log",
    },
}


def _log_level(name: Any) -> int:
    """Maps a level name such as "debug" to its numeric value."""
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ValueError(f"Configuration error: unknown log level '{name}'.")
    return level


def _build_handlers(log_file_path: Optional[str], formatter: logging.Formatter) -> List[logging.Handler]:
    """Console output always; a rotating file only when a path is configured."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        # 1MB per file, 5 backups.
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=1024*1024, backupCount=5
        ))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Routes the root logger to the console and, unless "log_file" is null,
    to a rotating log file. Calling it again replaces the previous handlers.
    """
    log_config = {**DEFAULT_CONFIG['logging'], **config.get('logging', {})}
    level = _log_level(log_config['level'])

    logger = logging.getLogger()
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_config['format'])
    for handler in _build_handlers(log_config['log_file'], formatter):
        logger.addHandler(handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level {logging.getLevelName(level)}, file: {log_config['log_file'] or 'none'}")


def with_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Returns a copy of `config` with missing sections and keys taken from
    DEFAULT_CONFIG. Unknown sections pass through untouched.
    """
    merged = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in config.items():
        if section not in merged:
            merged[section] = values
        elif isinstance(values, dict):
            merged[section].update(values)
        else:
            raise ValueError(f"Configuration error: section '{section}' must be an object.")
    return merged


def load_config(path: str) -> Dict[str, Any]:
    """Reads the JSON config at `path` and fills in every missing setting."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            raw = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError as e:
        logging.error(f"Error decoding JSON from {path}: line {e.lineno}, column {e.colno}.")
        raise

    try:
        if not isinstance(raw, dict):
            raise ValueError(f"Configuration error: {path} must hold a JSON object.")
        config = with_defaults(raw)
    except ValueError as e:
        logging.error(str(e))
        raise
    logging.info("Configuration loaded successfully.")
    return config


def hsla_color(hue: float, saturation: float, lightness: float, alpha: float) -> Tuple[int, int, int, int]:
    """
    Converts CSS-style HSLA (hue in degrees, the rest in percent) to an
    RGBA tuple of 0-255 ints.
    """
    color = pygame.Color(0, 0, 0, 0)
    color.hsla = (
        float(hue) % 360.0,
        min(max(float(saturation), 0.0), 100.0),
        min(max(float(lightness), 0.0), 100.0),
        min(max(float(alpha), 0.0), 100.0),
    )
    return (color.r, color.g, color.b, color.a)
